"""
Standard span attributes for eventfixture.

Attribute names used on dispatch spans, kept in one place so spans stay
consistent across components.
"""

# =============================================================================
# Aggregate Attributes
# =============================================================================

ATTR_AGGREGATE_ID = "eventfixture.aggregate.id"
"""Identifier of the aggregate under test (string)."""

ATTR_AGGREGATE_TYPE = "eventfixture.aggregate.type"
"""Type name of the aggregate (e.g., 'Order', 'User')."""

# =============================================================================
# Command Attributes
# =============================================================================

ATTR_COMMAND_TYPE = "eventfixture.command.type"
"""Type name of the dispatched command (e.g., 'ShipOrder')."""

ATTR_COMMAND_ID = "eventfixture.command.id"
"""Unique identifier of the command message (UUID string)."""

ATTR_HANDLER_NAME = "eventfixture.handler.name"
"""Name of the command handler being invoked (string)."""

# =============================================================================
# Outcome Attributes
# =============================================================================

ATTR_EVENT_COUNT = "eventfixture.event.count"
"""Number of events captured by the unit of work (integer)."""

ATTR_OUTCOME = "eventfixture.outcome"
"""'success' or 'failure'."""

ATTR_ERROR_TYPE = "eventfixture.error.type"
"""Exception class name of a failed dispatch (string)."""

__all__ = [
    "ATTR_AGGREGATE_ID",
    "ATTR_AGGREGATE_TYPE",
    "ATTR_COMMAND_TYPE",
    "ATTR_COMMAND_ID",
    "ATTR_HANDLER_NAME",
    "ATTR_EVENT_COUNT",
    "ATTR_OUTCOME",
    "ATTR_ERROR_TYPE",
]
