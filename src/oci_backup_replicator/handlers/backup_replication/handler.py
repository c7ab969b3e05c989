"""Boot volume backup replication handler.

Provides the function handler that resolves a block volume lifecycle event
into an action and dispatches it to the copy or delete executor.
"""

from dataclasses import dataclass, field
from typing import Optional

from oci_backup_replicator.common.handler import FunctionHandler
from oci_backup_replicator.handlers.backup_replication.dispatcher import ActionDispatcher
from oci_backup_replicator.handlers.backup_replication.model import (
    LifecycleEvent,
    ReplicationSettings,
)
from oci_backup_replicator.handlers.backup_replication.resolver import ActionResolver

DONE_MESSAGE = "Done!"


@dataclass  # type: ignore[misc] # mypy #5374
class BackupReplicationHandler(FunctionHandler[LifecycleEvent]):
    """Handler replicating boot volume backups into a second region.

    Each invocation runs Resolver -> Dispatcher -> Executor once. Settings are
    read from the invocation configuration on every call unless injected.

    Attributes:
        settings: Fixed replication settings. Read per invocation if None.
        dispatcher: The action dispatcher. Defaults to copy and delete executors.

    Example:
        ```python
        handler = BackupReplicationHandler.get_handler()
        # Or with fixed settings
        handler = BackupReplicationHandler(
            settings=ReplicationSettings("us-ashburn-1", "us-phoenix-1")
        ).get_handler()
        ```
    """

    settings: Optional[ReplicationSettings] = None
    dispatcher: ActionDispatcher = field(default_factory=ActionDispatcher)

    def get_settings(self) -> ReplicationSettings:
        if self.settings is not None:
            return self.settings
        return ReplicationSettings.from_mapping(self.context.config)

    def handle(self, request: LifecycleEvent) -> Optional[str]:
        """Resolve the event and dispatch the resulting action.

        Args:
            request (LifecycleEvent): The lifecycle event of this invocation.

        Returns:
            "Done!" if an executor ran, None if no executor matched the event type.
        """
        self.log.info(
            f"Received {request.event_type or '<no event type>'} for {request.data.resource_id}"
        )
        resolver = ActionResolver(settings=self.get_settings())
        resolver.log = self.log
        action = resolver.resolve(request, self.context)

        self.dispatcher.log = self.log
        result = self.dispatcher.dispatch(action)
        if not result.executed:
            self.log.warning(f"Nothing was done for {action.event_type!r}: {result.error}")
            return None
        self.log.info(result.detail)
        return DONE_MESSAGE


handler = BackupReplicationHandler.get_handler()
