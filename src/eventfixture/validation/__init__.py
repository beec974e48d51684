"""
Then-phase validation for the eventfixture library.

This module provides:
- ResultValidator: Assertions over the outcome of one command dispatch
- Matchers: Named predicates for events, exceptions and results
"""

from eventfixture.validation.matchers import (
    Matcher,
    all_of,
    any_exception,
    any_of,
    as_matcher,
    equal_to,
    has_fields,
    instance_of,
    message_contains,
)
from eventfixture.validation.validator import ResultValidator

__all__ = [
    "ResultValidator",
    # Matchers
    "Matcher",
    "as_matcher",
    "any_exception",
    "instance_of",
    "message_contains",
    "equal_to",
    "has_fields",
    "all_of",
    "any_of",
]
