from abc import abstractmethod
from dataclasses import dataclass

from oci_backup_replicator.common.logging import LoggingMixins
from oci_backup_replicator.handlers.backup_replication.model import Action, ActionResult


@dataclass
class ActionExecutor(LoggingMixins):
    """Abstract base class for the executors an action can be dispatched to.

    Executors receive fully resolved actions and do not re-validate them.

    Example:
        ```python
        @dataclass
        class MyExecutor(ActionExecutor):
            def execute(self, action: Action) -> ActionResult:
                return ActionResult(
                    kind=action.kind, event_type=action.event_type, executed=True
                )
        ```
    """

    @abstractmethod
    def execute(self, action: Action) -> ActionResult:
        """Carry out the action.

        Args:
            action (Action): The resolved action.

        Returns:
            Result describing what was done.
        """
        raise NotImplementedError("Please implement `execute` method")  # pragma: no cover

    def __str__(self) -> str:
        return self.__class__.__name__
