from dataclasses import dataclass

from oci_backup_replicator.handlers.backup_replication.executors.base import ActionExecutor
from oci_backup_replicator.handlers.backup_replication.model import Action, ActionResult


@dataclass
class DeleteReplicaExecutor(ActionExecutor):
    """Reacts to a deleted backup.

    Removing the replica in the destination region is not implemented; the
    executor acknowledges the event and makes no remote call.
    """

    def execute(self, action: Action) -> ActionResult:
        self.log.info(
            f"Backup {action.backup_id} was deleted. Replica cleanup is not implemented.",
            extra={"action": action.to_log_dict()},
        )
        return ActionResult(
            kind=action.kind,
            event_type=action.event_type,
            executed=True,
            detail="Replica cleanup skipped",
        )
