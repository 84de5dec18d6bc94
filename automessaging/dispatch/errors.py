from __future__ import annotations


class DispatchError(Exception):
    pass


class MisconfiguredError(DispatchError):
    """No webhook URL configured; the cycle cannot run."""


class FetchFailedError(DispatchError):
    """The store could not return the pending batch."""


class DeliveryFailedError(DispatchError):
    """Transport error, non-2xx status, bad body or rejected acknowledgment."""

    def __init__(self, message_id: str, reason: str):
        super().__init__(f"delivery of {message_id} failed: {reason}")
        self.message_id = message_id
        self.reason = reason


class MarkFailedError(DispatchError):
    def __init__(self, message_id: str, reason: str):
        super().__init__(f"marking {message_id} as sent failed: {reason}")
        self.message_id = message_id
        self.reason = reason


class MetadataWriteFailedError(DispatchError):
    def __init__(self, message_id: str, reason: str):
        super().__init__(f"metadata write for {message_id} failed: {reason}")
        self.message_id = message_id
        self.reason = reason


class MessageNotFound(DispatchError):
    """No unsent row with the given id remains."""


class CycleCancelled(Exception):
    """Raised when a cycle observes its cancellation scope."""
