"""Common type definitions for the eventfixture library."""

from typing import TypeVar

# Type variable for the aggregate under test
TAggregate = TypeVar("TAggregate")
