from dataclasses import dataclass, field
from typing import Dict

from aws_lambda_powertools.logging import Logger

from oci_backup_replicator.common.logging import LoggingMixins
from oci_backup_replicator.exceptions import UnmatchedActionKindError
from oci_backup_replicator.handlers.backup_replication.executors.base import ActionExecutor
from oci_backup_replicator.handlers.backup_replication.executors.copy import (
    CopyBootVolumeBackupExecutor,
)
from oci_backup_replicator.handlers.backup_replication.executors.delete import (
    DeleteReplicaExecutor,
)
from oci_backup_replicator.handlers.backup_replication.model import (
    Action,
    ActionKind,
    ActionResult,
)


@dataclass
class ActionDispatcher(LoggingMixins):
    """Routes a resolved action to the executor registered for its kind.

    Exactly one executor runs per action. Actions whose kind has no executor
    are reported and skipped; new event types can reach the function before
    an executor exists for them. Setting the dispatcher's logger also sets
    it on every registered executor.

    Attributes:
        executors: Executor per action kind. Defaults to copy and delete executors.
    """

    executors: Dict[ActionKind, ActionExecutor] = field(default_factory=dict)

    def __post_init__(self):
        if not self.executors:
            self.executors = {
                ActionKind.COPY: CopyBootVolumeBackupExecutor(),
                ActionKind.DELETE: DeleteReplicaExecutor(),
            }

    @LoggingMixins.logger.setter
    def logger(self, value: Logger):
        self._logger = value
        for executor in self.executors.values():
            executor.log = value

    def dispatch(self, action: Action) -> ActionResult:
        """Run the executor for the action's kind.

        Args:
            action (Action): A fully resolved action.

        Returns:
            The executor's result, or an unexecuted result carrying an
            UnmatchedActionKindError if no executor handles the kind.
        """
        executor = self.executors.get(action.kind)
        if executor is None:
            error = UnmatchedActionKindError(action.event_type)
            self.log.warning(str(error), extra={"action": action.to_log_dict()})
            return ActionResult(
                kind=action.kind,
                event_type=action.event_type,
                executed=False,
                detail="No matching action",
                error=error,
            )
        self.log.info(f"{executor} handling {action.kind.value} action")
        return executor.execute(action)
