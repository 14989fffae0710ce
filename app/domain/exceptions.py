"""Errors raised by use cases and translated to HTTP responses by the API layer."""


class NotFoundError(LookupError):
    """An announcement, notification or batch identifier does not resolve."""


class ValidationError(ValueError):
    """Input rejected before any write happened."""


class TransactionFailure(RuntimeError):
    """An all-or-nothing unit of work failed and was rolled back."""


class RecipientWriteError(RuntimeError):
    """A single recipient notification could not be written."""

    def __init__(self, recipient_id: int, reason: str) -> None:
        super().__init__(f"Recipient {recipient_id}: {reason}")
        self.recipient_id = recipient_id
        self.reason = reason


class BatchAlreadyFinalizedError(RuntimeError):
    """A terminal batch was asked to record another outcome."""


__all__ = [
    "BatchAlreadyFinalizedError",
    "NotFoundError",
    "RecipientWriteError",
    "TransactionFailure",
    "ValidationError",
]
