from dataclasses import dataclass, field

from oci_backup_replicator.common.logging import LoggingMixins
from oci_backup_replicator.common.models import InvocationContext
from oci_backup_replicator.exceptions import MissingConfigurationError
from oci_backup_replicator.handlers.backup_replication.model import (
    DESTINATION_REGION_KEY,
    SOURCE_REGION_KEY,
    Action,
    LifecycleEvent,
    ReplicationSettings,
)


@dataclass
class ActionResolver(LoggingMixins):
    """Turns a lifecycle event and the replication settings into an Action.

    Resolution performs no I/O. Both regions are required for every event
    type, so a misconfigured function fails loudly on the first event it
    receives.

    Attributes:
        settings: The replication settings of the current invocation.
    """

    settings: ReplicationSettings = field(default_factory=ReplicationSettings)

    def resolve(self, event: LifecycleEvent, context: InvocationContext) -> Action:
        """Resolve an event into an action.

        Args:
            event (LifecycleEvent): The inbound lifecycle event.
            context (InvocationContext): The context of the current invocation.

        Raises:
            MissingConfigurationError: If a region setting is absent. The partially
                resolved action is attached to the error.

        Returns:
            The fully resolved action.
        """
        action = Action(
            event_type=event.event_type,
            backup_id=event.data.resource_id,
            backup_name=event.data.resource_name,
        )

        if not self.settings.source_region:
            raise self._missing(SOURCE_REGION_KEY, action)
        action.source_region = self.settings.source_region

        if not self.settings.destination_region:
            raise self._missing(DESTINATION_REGION_KEY, action)
        action.destination_region = self.settings.destination_region

        action.context = context
        self.log.info("Resolved action", extra={"action": action.to_log_dict()})
        return action

    def _missing(self, setting: str, action: Action) -> MissingConfigurationError:
        error = MissingConfigurationError(setting=setting, action=action)
        self.log.error(str(error), extra={"action": action.to_log_dict()})
        return error
