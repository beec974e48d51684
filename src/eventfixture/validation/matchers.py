"""
Named predicates for then-phase assertions.

A Matcher is a callable predicate with a readable description. Validator
failure messages print the description, so a failing test says what was
expected rather than ``<function <lambda> at 0x...>``.

Example:
    >>> from eventfixture.validation.matchers import instance_of, message_contains, all_of
    >>> matcher = all_of(instance_of(ValueError), message_contains("negative"))
    >>> matcher(ValueError("amount is negative"))
    True
    >>> matcher
    all_of(instance_of(ValueError), message_contains('negative'))
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class _Missing:
    """Sentinel class for detecting missing attributes."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"


_MISSING = _Missing()


class Matcher:
    """
    A predicate with a description.

    Args:
        predicate: Callable returning a truthy value when the item matches
        description: Text shown in assertion failure messages
    """

    __slots__ = ("_predicate", "_description")

    def __init__(self, predicate: Callable[[Any], bool], description: str) -> None:
        self._predicate = predicate
        self._description = description

    def __call__(self, item: Any) -> bool:
        return bool(self._predicate(item))

    @property
    def description(self) -> str:
        return self._description

    def __repr__(self) -> str:
        return self._description


def as_matcher(value: Any) -> Matcher:
    """
    Coerce a value into a Matcher.

    Matchers pass through, exception classes become ``instance_of``, other
    callables are wrapped as-is, and anything else becomes ``equal_to``.
    """
    if isinstance(value, Matcher):
        return value
    if isinstance(value, type) and issubclass(value, BaseException):
        return instance_of(value)
    if callable(value):
        name = getattr(value, "__name__", repr(value))
        return Matcher(value, name)
    return equal_to(value)


def any_exception() -> Matcher:
    """Match any exception instance."""
    return Matcher(lambda item: isinstance(item, BaseException), "any_exception()")


def instance_of(expected_type: type) -> Matcher:
    """Match instances of ``expected_type`` (subclasses included)."""
    return Matcher(
        lambda item: isinstance(item, expected_type),
        f"instance_of({expected_type.__name__})",
    )


def message_contains(text: str) -> Matcher:
    """Match exceptions (or any object) whose ``str()`` contains ``text``."""
    return Matcher(lambda item: text in str(item), f"message_contains({text!r})")


def equal_to(value: Any) -> Matcher:
    return Matcher(lambda item: item == value, f"equal_to({value!r})")


def has_fields(expected_type: type | None = None, **fields: Any) -> Matcher:
    """
    Match objects of ``expected_type`` whose attributes equal ``fields``.

    Args:
        expected_type: Required type, or None to accept any type
        **fields: Attribute values the object must carry

    Example:
        >>> has_fields(MessageChanged, message="message2")(MessageChanged(message="message2"))
        True
    """

    def predicate(item: Any) -> bool:
        if expected_type is not None and not isinstance(item, expected_type):
            return False
        return all(getattr(item, name, _MISSING) == value for name, value in fields.items())

    parts = [expected_type.__name__] if expected_type is not None else []
    parts.extend(f"{name}={value!r}" for name, value in fields.items())
    return Matcher(predicate, f"has_fields({', '.join(parts)})")


def all_of(*matchers: Any) -> Matcher:
    """Match when every given matcher matches."""
    resolved = [as_matcher(m) for m in matchers]
    return Matcher(
        lambda item: all(m(item) for m in resolved),
        f"all_of({', '.join(repr(m) for m in resolved)})",
    )


def any_of(*matchers: Any) -> Matcher:
    """Match when at least one of the given matchers matches."""
    resolved = [as_matcher(m) for m in matchers]
    return Matcher(
        lambda item: any(m(item) for m in resolved),
        f"any_of({', '.join(repr(m) for m in resolved)})",
    )


__all__ = [
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
