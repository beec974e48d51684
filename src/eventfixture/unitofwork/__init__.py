"""
Unit of work for the eventfixture library.

This module provides:
- TransactionScope: The unit-of-work state machine around one dispatch
- ScopePhase: IDLE / ACTIVE / COMMITTED / ROLLED_BACK
- Success, Failure, Outcome: Explicit dispatch results consumed by complete()
- EventCaptureBuffer: The append-only event record owned by a scope
"""

from eventfixture.unitofwork.buffer import EventCaptureBuffer
from eventfixture.unitofwork.scope import (
    Failure,
    Outcome,
    ScopePhase,
    Success,
    TransactionScope,
)

__all__ = [
    "EventCaptureBuffer",
    "Failure",
    "Outcome",
    "ScopePhase",
    "Success",
    "TransactionScope",
]
