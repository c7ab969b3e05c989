"""Backup replication models.

Defines the inbound lifecycle event emitted by the OCI Events service, the
replication settings, and the action derived from both.
"""

__all__ = [
    "ACTION_KINDS",
    "Action",
    "ActionKind",
    "ActionResult",
    "AdditionalDetails",
    "BOOT_VOLUME_BACKUP_CREATED",
    "BOOT_VOLUME_BACKUP_DELETED",
    "EventData",
    "EventExtensions",
    "LifecycleEvent",
    "ReplicationSettings",
]

import re
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, get_origin

import marshmallow as mm
from aibs_informatics_core.models.base import DictField, SchemaModel, StringField, custom_field
from aibs_informatics_core.utils.os_operations import get_env_var

from oci_backup_replicator.common.models import InvocationContext
from oci_backup_replicator.exceptions import ReplicatorError

BOOT_VOLUME_BACKUP_CREATED = "com.oraclecloud.blockvolumes.createbootvolumebackup.end"
BOOT_VOLUME_BACKUP_DELETED = "com.oraclecloud.blockvolumes.deletebootvolumebackup.end"

SOURCE_REGION_KEY = "OCI_SOURCE_REGION"
DESTINATION_REGION_KEY = "OCI_DESTINATION_REGION"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_EVENT_TIME_FIELD = mm.fields.DateTime()

# Fields the resolver reads. A value of the wrong type rejects the event.
EVENT_TYPE_FIELDS = frozenset({"event_type"})
RESOURCE_FIELDS = frozenset({"resource_id", "resource_name"})


def to_snake_case(key: str) -> str:
    """Convert a camelCase event key (``resourceId``, ``eventID``) to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def is_acceptable_value(field_type: Any, value: Any) -> bool:
    """Whether ``value`` can be loaded into a model attribute of ``field_type``."""
    if field_type is str:
        return isinstance(value, str)
    if get_origin(field_type) is dict:
        return isinstance(value, dict)
    if isinstance(field_type, type) and issubclass(field_type, SchemaModel):
        return isinstance(value, dict)
    if field_type == Optional[datetime]:
        try:
            _EVENT_TIME_FIELD.deserialize(value)
        except mm.ValidationError:
            return False
    return True


def normalize_event_keys(
    model_cls: type, data: Any, strict_fields: FrozenSet[str] = frozenset()
) -> Any:
    """Rename camelCase keys to model attribute names and drop everything else.

    Null values, and values of the wrong type or format, are dropped as well so
    that the model defaults apply. Fields named in ``strict_fields`` are kept
    as given and validated by the schema.
    """
    if not isinstance(data, dict):
        return data
    field_types = {model_field.name: model_field.type for model_field in fields(model_cls)}
    normalized = {}
    for key, value in data.items():
        snake_key = to_snake_case(key)
        if snake_key not in field_types or value is None:
            continue
        if snake_key in strict_fields or is_acceptable_value(field_types[snake_key], value):
            normalized[snake_key] = value
    return normalized


# ----------------------------------------------------------
# Lifecycle Event
# ----------------------------------------------------------


@dataclass
class AdditionalDetails(SchemaModel):
    source_type: str = custom_field(mm_field=StringField(), default="")
    volume_id: str = custom_field(mm_field=StringField(), default="")

    @classmethod
    @mm.pre_load
    def _normalize_keys(cls, data: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        return normalize_event_keys(cls, data)


@dataclass
class EventData(SchemaModel):
    """Resource specific payload of a lifecycle event.

    Attributes:
        compartment_id: OCID of the compartment holding the resource.
        compartment_name: Name of that compartment.
        resource_name: Display name of the resource.
        resource_id: OCID of the resource the event concerns.
        availability_domain: Availability domain of the resource, if any.
        additional_details: Volume details attached by the block storage service.
        freeform_tags: Free-form tags of the resource.
        defined_tags: Defined tags of the resource, keyed by namespace.
    """

    compartment_id: str = custom_field(mm_field=StringField(), default="")
    compartment_name: str = custom_field(mm_field=StringField(), default="")
    resource_name: str = custom_field(mm_field=StringField(), default="")
    resource_id: str = custom_field(mm_field=StringField(), default="")
    availability_domain: str = custom_field(mm_field=StringField(), default="")
    additional_details: AdditionalDetails = custom_field(
        mm_field=AdditionalDetails.as_mm_field(), default_factory=AdditionalDetails
    )
    freeform_tags: Dict[str, str] = custom_field(mm_field=DictField(), default_factory=dict)
    defined_tags: Dict[str, Dict[str, Any]] = custom_field(
        mm_field=DictField(), default_factory=dict
    )

    @classmethod
    @mm.pre_load
    def _normalize_keys(cls, data: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        return normalize_event_keys(cls, data, strict_fields=RESOURCE_FIELDS)


@dataclass
class EventExtensions(SchemaModel):
    compartment_id: str = custom_field(mm_field=StringField(), default="")

    @classmethod
    @mm.pre_load
    def _normalize_keys(cls, data: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        return normalize_event_keys(cls, data)


@dataclass
class LifecycleEvent(SchemaModel):
    """A lifecycle notification delivered by the OCI Events service.

    Only ``event_type`` and the ``data.resource_*`` fields drive behavior; the
    remaining fields are carried for logging and future handlers. Unknown keys
    are ignored. Missing keys, and remaining fields holding a value of the
    wrong type or format, fall back to empty values.

    Attributes:
        event_type: Identifier of the lifecycle transition.
        cloud_events_version: CloudEvents specification version.
        event_type_version: Version of the event type schema.
        source: Service that emitted the event.
        event_id: Unique id of the event.
        event_time: Time the event occurred. Informational only.
        content_type: Content type of ``data``.
        data: Resource specific payload.
        extensions: CloudEvents extensions.
    """

    event_type: str = custom_field(mm_field=StringField(), default="")
    cloud_events_version: str = custom_field(mm_field=StringField(), default="")
    event_type_version: str = custom_field(mm_field=StringField(), default="")
    source: str = custom_field(mm_field=StringField(), default="")
    event_id: str = custom_field(mm_field=StringField(), default="")
    event_time: Optional[datetime] = custom_field(
        mm_field=mm.fields.DateTime(allow_none=True), default=None
    )
    content_type: str = custom_field(mm_field=StringField(), default="")
    data: EventData = custom_field(mm_field=EventData.as_mm_field(), default_factory=EventData)
    extensions: EventExtensions = custom_field(
        mm_field=EventExtensions.as_mm_field(), default_factory=EventExtensions
    )

    @classmethod
    @mm.pre_load
    def _normalize_keys(cls, data: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        return normalize_event_keys(cls, data, strict_fields=EVENT_TYPE_FIELDS)


# ----------------------------------------------------------
# Settings
# ----------------------------------------------------------


@dataclass
class ReplicationSettings:
    """Regions between which backups are replicated.

    Empty values are treated as not configured.

    Attributes:
        source_region: Region the backups are created in.
        destination_region: Region the backups are copied to.
    """

    source_region: Optional[str] = None
    destination_region: Optional[str] = None

    @classmethod
    def from_mapping(cls, config: Mapping[str, str]) -> "ReplicationSettings":
        return cls(
            source_region=config.get(SOURCE_REGION_KEY) or None,
            destination_region=config.get(DESTINATION_REGION_KEY) or None,
        )

    @classmethod
    def from_env(cls) -> "ReplicationSettings":
        return cls(
            source_region=get_env_var(SOURCE_REGION_KEY) or None,
            destination_region=get_env_var(DESTINATION_REGION_KEY) or None,
        )


# ----------------------------------------------------------
# Action
# ----------------------------------------------------------


class ActionKind(str, Enum):
    """Kinds of action an event can resolve to.

    Attributes:
        COPY: Copy the backup into the destination region.
        DELETE: Remove the replica of a deleted backup.
        UNKNOWN: No executor handles this event type.
    """

    COPY = "copy"
    DELETE = "delete"
    UNKNOWN = "unknown"


ACTION_KINDS: Dict[str, ActionKind] = {
    BOOT_VOLUME_BACKUP_CREATED: ActionKind.COPY,
    BOOT_VOLUME_BACKUP_DELETED: ActionKind.DELETE,
}
"""Lifecycle event types with a known action. Every other type is UNKNOWN."""


@dataclass
class Action:
    """A fully resolved command derived from one lifecycle event.

    Attributes:
        event_type: The raw event type the action was resolved from.
        backup_id: OCID of the boot volume backup.
        backup_name: Display name of the boot volume backup.
        source_region: Region holding the backup.
        destination_region: Region to copy the backup to.
        context: Context of the invocation that produced the action.
    """

    event_type: str = ""
    backup_id: str = ""
    backup_name: str = ""
    source_region: str = ""
    destination_region: str = ""
    context: InvocationContext = field(default_factory=InvocationContext, repr=False)

    @property
    def kind(self) -> ActionKind:
        return ACTION_KINDS.get(self.event_type, ActionKind.UNKNOWN)

    def to_log_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "event_type": self.event_type,
            "backup_id": self.backup_id,
            "backup_name": self.backup_name,
            "source_region": self.source_region,
            "destination_region": self.destination_region,
            "call_id": self.context.call_id,
        }


@dataclass
class ActionResult:
    """Outcome of dispatching an action.

    Attributes:
        kind: The kind of the dispatched action.
        event_type: The raw event type of the dispatched action.
        executed: Whether an executor ran.
        detail: Human readable summary of what happened.
        error: Reported, non fatal error (an unmatched action kind).
    """

    kind: ActionKind
    event_type: str
    executed: bool
    detail: str = ""
    error: Optional[ReplicatorError] = None
