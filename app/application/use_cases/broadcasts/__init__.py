"""Broadcast use cases: recipient snapshots, batches and the fan-out."""

from .batches import get_batch, is_announcement_sent, list_batches, record_outcome, start_batch
from .cancellation import CancellationRegistry, cancellation_registry
from .orchestrator import (
    BroadcastOrchestrator,
    DispatchPlan,
    DispatchResult,
    cancel_announcement_dispatch,
    cancel_dispatch,
    dispatch,
    prepare_dispatch,
    prepare_retry,
    retry_failed,
    run_dispatch,
)
from .recipients import resolve_recipients
from .writer import NotificationWriter, OutgoingMessage

__all__ = [
    "BroadcastOrchestrator",
    "CancellationRegistry",
    "DispatchPlan",
    "DispatchResult",
    "NotificationWriter",
    "OutgoingMessage",
    "cancel_announcement_dispatch",
    "cancel_dispatch",
    "cancellation_registry",
    "dispatch",
    "get_batch",
    "is_announcement_sent",
    "list_batches",
    "prepare_dispatch",
    "prepare_retry",
    "record_outcome",
    "resolve_recipients",
    "retry_failed",
    "run_dispatch",
    "start_batch",
]
