"""Cross-region boot volume backup copy.

Copies a boot volume backup from the source region into the destination
region using the block storage API. The request returns as soon as the copy
is accepted; the copy itself completes asynchronously and is not tracked.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from oci.auth.signers import get_resource_principals_signer
from oci.core import BlockstorageClient
from oci.core.models import CopyBootVolumeBackupDetails
from oci.retry import NoneRetryStrategy

from oci_backup_replicator.exceptions import (
    CredentialAcquisitionError,
    InvocationDeadlineExceededError,
    RemoteCallError,
)
from oci_backup_replicator.handlers.backup_replication.executors.base import ActionExecutor
from oci_backup_replicator.handlers.backup_replication.model import Action, ActionResult

OPC_REQUEST_ID_HEADER = "opc-request-id"
CONNECT_TIMEOUT_SECONDS = 10.0


@dataclass
class CopyBootVolumeBackupExecutor(ActionExecutor):
    """Copies a boot volume backup into the destination region.

    Authenticates with the resource principal of the function and sends a
    single copy request to the block storage service of the source region.

    Attributes:
        signer_provider: Returns the request signer. Defaults to the resource principal signer.
        client_factory: Builds the block storage client from ``config`` and ``signer``.

    Example:
        ```python
        executor = CopyBootVolumeBackupExecutor()
        result = executor.execute(action)
        ```
    """

    signer_provider: Callable[[], Any] = field(default=get_resource_principals_signer)
    client_factory: Callable[..., Any] = field(default=BlockstorageClient)

    def execute(self, action: Action) -> ActionResult:
        """Request a copy of the backup named by the action.

        Args:
            action (Action): A resolved copy action.

        Raises:
            CredentialAcquisitionError: If no signer could be obtained.
            InvocationDeadlineExceededError: If the invocation deadline passed.
            RemoteCallError: If the client could not be built or the request failed.

        Returns:
            Result describing the accepted copy.
        """
        client = self._get_client(action)
        details = CopyBootVolumeBackupDetails(
            destination_region=action.destination_region,
            display_name=action.backup_name,
        )

        self.log.info(
            f"Copying boot volume backup {action.backup_id} "
            f"from {action.source_region} to {action.destination_region}"
        )
        try:
            response = client.copy_boot_volume_backup(
                boot_volume_backup_id=action.backup_id,
                copy_boot_volume_backup_details=details,
                retry_strategy=NoneRetryStrategy(),
            )
        except Exception as e:
            if action.context.is_expired():
                raise self._deadline_exceeded(action) from e
            self.log.error(f"Copy request for {action.backup_id} failed: {e}")
            raise RemoteCallError(
                f"Could not copy boot volume backup {action.backup_id} "
                f"to {action.destination_region}: {e}"
            ) from e

        copy_id = response.data.id
        self.log.info(
            f"Copy of {action.backup_id} accepted as {copy_id}",
            extra={
                "copy_id": copy_id,
                "lifecycle_state": response.data.lifecycle_state,
                "opc_request_id": response.headers.get(OPC_REQUEST_ID_HEADER),
            },
        )
        return ActionResult(
            kind=action.kind,
            event_type=action.event_type,
            executed=True,
            detail=f"Copy {copy_id} accepted in {action.destination_region}",
        )

    def _get_client(self, action: Action) -> Any:
        try:
            signer = self.signer_provider()
        except Exception as e:
            self.log.error(f"Could not acquire resource principal credentials: {e}")
            raise CredentialAcquisitionError(
                f"Could not acquire resource principal credentials: {e}"
            ) from e

        client_kwargs: Dict[str, Any] = {
            "config": {"region": action.source_region},
            "signer": signer,
        }
        remaining = action.context.remaining_seconds()
        if remaining is not None:
            if remaining <= 0:
                raise self._deadline_exceeded(action)
            connect_timeout = min(CONNECT_TIMEOUT_SECONDS, remaining / 2)
            client_kwargs["timeout"] = (connect_timeout, remaining - connect_timeout)

        try:
            return self.client_factory(**client_kwargs)
        except Exception as e:
            self.log.error(f"Could not create block storage client for {action.source_region}: {e}")
            raise RemoteCallError(
                f"Could not create block storage client for {action.source_region}: {e}"
            ) from e

    def _deadline_exceeded(self, action: Action) -> InvocationDeadlineExceededError:
        error = InvocationDeadlineExceededError(
            f"Invocation deadline {action.context.deadline} passed "
            f"before the copy of {action.backup_id} was accepted"
        )
        self.log.error(str(error))
        return error
