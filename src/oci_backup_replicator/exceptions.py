"""Errors raised while handling a backup lifecycle event."""

from typing import TYPE_CHECKING, Optional

from aibs_informatics_core.exceptions import ApplicationException

if TYPE_CHECKING:  # pragma: no cover
    from oci_backup_replicator.handlers.backup_replication.model import Action


class ReplicatorError(ApplicationException):
    """Base class for all replicator errors."""


class MalformedEventError(ReplicatorError):
    """The invocation body could not be parsed into a lifecycle event."""


class MissingConfigurationError(ReplicatorError):
    """A required setting is absent.

    Attributes:
        setting: Name of the missing setting.
        action: The partially resolved action. For diagnostics only; never dispatch it.
    """

    def __init__(self, setting: str, action: Optional["Action"] = None):
        super().__init__(f"Required setting {setting} is not configured")
        self.setting = setting
        self.action = action


class UnmatchedActionKindError(ReplicatorError):
    """No executor is registered for an event type. Reported, never raised to the host."""

    def __init__(self, event_type: str):
        super().__init__(f"No matching action for event type {event_type!r}. Doing nothing.")
        self.event_type = event_type


class CredentialAcquisitionError(ReplicatorError):
    """The resource principal signer could not be obtained."""


class RemoteCallError(ReplicatorError):
    """The block storage client could not be built or the copy request failed."""


class InvocationDeadlineExceededError(ReplicatorError):
    """The invocation deadline passed before the copy request was accepted."""
