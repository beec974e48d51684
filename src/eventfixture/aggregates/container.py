"""
Container for the aggregate instance under test.

The fixture keeps the aggregate in an AggregateStateContainer for the length
of one given/when/then cycle. The container is created either from a direct
state factory (``given_state``) or empty (``given_no_prior_activity``), in
which case the command's creation handler fills it.
"""

import logging
from collections.abc import Callable
from typing import Any, Generic

from eventfixture.exceptions import FixtureExecutionError
from eventfixture.handlers.registry import AggregateModel
from eventfixture.types import TAggregate

logger = logging.getLogger(__name__)


class AggregateStateContainer(Generic[TAggregate]):
    """
    Holds the live aggregate instance and its model.

    Example:
        >>> container = AggregateStateContainer.from_state(
        ...     AggregateModel.for_type(Account), lambda: Account("acc-1")
        ... )
        >>> container.identifier
        'acc-1'
    """

    def __init__(self, model: AggregateModel, instance: TAggregate | None = None) -> None:
        self._model = model
        self._instance = instance

    @classmethod
    def from_state(
        cls,
        model: AggregateModel,
        factory: Callable[[], TAggregate],
    ) -> "AggregateStateContainer[TAggregate]":
        """
        Create a container by constructing the aggregate directly.

        Args:
            model: The aggregate's model
            factory: Zero-argument callable returning the aggregate

        Returns:
            A container holding the new instance

        Raises:
            FixtureExecutionError: If the factory returns an instance of the wrong type
        """
        instance = factory()
        if not isinstance(instance, model.aggregate_class):
            raise FixtureExecutionError(
                f"State factory returned {type(instance).__name__}, "
                f"expected {model.aggregate_class.__name__}"
            )
        container = cls(model, instance)
        logger.debug(
            "Initialized %s %r from given state",
            model.aggregate_type,
            container.identifier,
            extra={
                "aggregate_type": model.aggregate_type,
                "aggregate_id": container.identifier,
            },
        )
        return container

    @classmethod
    def empty(cls, model: AggregateModel) -> "AggregateStateContainer[TAggregate]":
        """Create a container with no aggregate yet."""
        return cls(model, None)

    @property
    def model(self) -> AggregateModel:
        """Get the aggregate model."""
        return self._model

    @property
    def exists(self) -> bool:
        """Check whether the container holds an aggregate."""
        return self._instance is not None

    @property
    def instance(self) -> TAggregate:
        """
        Get the live aggregate instance.

        Raises:
            FixtureExecutionError: If no aggregate has been created
        """
        if self._instance is None:
            raise FixtureExecutionError(
                f"No {self._model.aggregate_type} aggregate exists. "
                "Use given_state() or dispatch a creation command first."
            )
        return self._instance

    @property
    def identifier(self) -> Any:
        """Get the aggregate's identifier, or None if there is no aggregate."""
        if self._instance is None:
            return None
        return self._model.identifier_of(self._instance)

    def replace(self, instance: TAggregate) -> None:
        """
        Store the instance produced by a creation handler.

        Args:
            instance: The new aggregate

        Raises:
            FixtureExecutionError: If the instance is of the wrong type
        """
        if not isinstance(instance, self._model.aggregate_class):
            raise FixtureExecutionError(
                f"Creation handler returned {type(instance).__name__}, "
                f"expected {self._model.aggregate_class.__name__}"
            )
        self._instance = instance

    def __repr__(self) -> str:
        return (
            f"AggregateStateContainer({self._model.aggregate_type}, "
            f"id={self.identifier!r})"
        )


__all__ = ["AggregateStateContainer"]
