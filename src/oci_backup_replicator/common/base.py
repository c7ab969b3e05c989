from oci_backup_replicator.common.models import InvocationContext

CONTEXT_ATTR = "_context"


class HandlerMixins:
    """Invocation context and naming shared by a handler and its collaborators."""

    @property
    def context(self) -> InvocationContext:
        """Context of the invocation in progress.

        Raises:
            ValueError: If no invocation has started yet.
        """
        if not hasattr(self, CONTEXT_ATTR):
            raise ValueError(f"{self.__class__.__name__} has no invocation context")
        return getattr(self, CONTEXT_ATTR)

    @context.setter
    def context(self, value: InvocationContext):
        setattr(self, CONTEXT_ATTR, value)

    @classmethod
    def handler_name(cls) -> str:
        return cls.__name__

    @classmethod
    def service_name(cls) -> str:
        """Name attached to every log record of this component."""
        return cls.__name__
