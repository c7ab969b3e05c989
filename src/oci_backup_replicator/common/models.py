"""Data models describing a single function invocation.

Provides the invocation context handed to every handler, built either from an
``fdk`` context inside OCI Functions or from the local environment.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from aibs_informatics_core.utils.hashing import uuid_str
from aibs_informatics_core.utils.os_operations import get_env_var

FN_CALL_ID_KEY = "FN_CALL_ID"
FN_FN_ID_KEY = "FN_FN_ID"
FN_APP_ID_KEY = "FN_APP_ID"
FN_DEADLINE_SECONDS_KEY = "FN_DEADLINE_SECONDS"

DEFAULT_DEADLINE_SECONDS = 30.0


def parse_deadline(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a deadline as reported by the Fn runtime.

    Args:
        value (Union[str, datetime, None]): ISO 8601 string, datetime or None.

    Returns:
        A timezone aware datetime, or None if no deadline was given.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class InvocationContext:
    """Context of one function invocation.

    Carries the caller supplied deadline and the function configuration. It is
    attached to every action and never outlives the invocation.

    Attributes:
        call_id: The Fn call id of the invocation.
        fn_id: The OCID of the function.
        app_id: The OCID of the application.
        deadline: Point in time after which the invocation is cancelled by the host.
        config: The function configuration (Fn config merged over the environment).
    """

    call_id: str = ""
    fn_id: str = ""
    app_id: str = ""
    deadline: Optional[datetime] = None
    config: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_fdk_context(cls, ctx: Any) -> "InvocationContext":
        """Build an invocation context from an ``fdk`` InvokeContext.

        Args:
            ctx (Any): The context passed by the ``fdk`` runtime to the handler.

        Returns:
            The invocation context.
        """
        config: Dict[str, str] = dict(os.environ)
        config.update(ctx.Config() or {})
        return cls(
            call_id=ctx.CallID() or "",
            fn_id=ctx.FnID() or "",
            app_id=ctx.AppID() or "",
            deadline=parse_deadline(ctx.Deadline()),
            config=config,
        )

    def remaining_seconds(self, now: Optional[datetime] = None) -> Optional[float]:
        """Seconds left until the deadline, or None if there is no deadline."""
        if self.deadline is None:
            return None
        now = now or datetime.now(timezone.utc)
        return (self.deadline - now).total_seconds()

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        remaining = self.remaining_seconds(now)
        return remaining is not None and remaining <= 0


@dataclass
class DefaultInvocationContext(InvocationContext):
    """Invocation context for running handlers outside of OCI Functions.

    All fields can be configured via environment variables. The deadline is
    set ``FN_DEADLINE_SECONDS`` (default 30) seconds after construction.
    """

    call_id: str = field(default_factory=lambda: get_env_var(FN_CALL_ID_KEY) or uuid_str())
    fn_id: str = field(default_factory=lambda: get_env_var(FN_FN_ID_KEY, default_value=""))
    app_id: str = field(default_factory=lambda: get_env_var(FN_APP_ID_KEY, default_value=""))
    config: Dict[str, str] = field(default_factory=lambda: dict(os.environ))

    def __post_init__(self):
        if self.deadline is None:
            seconds = float(
                get_env_var(FN_DEADLINE_SECONDS_KEY, default_value=str(DEFAULT_DEADLINE_SECONDS))
            )
            self.deadline = datetime.now(timezone.utc) + timedelta(seconds=seconds)
