import json
from test.oci_backup_replicator.base import (
    FunctionHandlerTestCase,
    make_event_body,
    make_event_document,
    mock_fdk_context,
)
from typing import Optional
from unittest import mock

from pytest import mark

from oci_backup_replicator.common.models import InvocationContext
from oci_backup_replicator.handlers.backup_replication.dispatcher import ActionDispatcher
from oci_backup_replicator.handlers.backup_replication.executors.copy import (
    CopyBootVolumeBackupExecutor,
)
from oci_backup_replicator.handlers.backup_replication.executors.delete import (
    DeleteReplicaExecutor,
)
from oci_backup_replicator.handlers.backup_replication.handler import (
    DONE_MESSAGE,
    BackupReplicationHandler,
)
from oci_backup_replicator.handlers.backup_replication.model import (
    BOOT_VOLUME_BACKUP_CREATED,
    BOOT_VOLUME_BACKUP_DELETED,
    ActionKind,
    ReplicationSettings,
)


class BackupReplicationHandlerTests(FunctionHandlerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client = mock.MagicMock()
        self.client.copy_boot_volume_backup.return_value.data.id = "ocid1.bootvolumebackup.copy"
        self.client.copy_boot_volume_backup.return_value.headers = {}
        self.client_factory = mock.MagicMock(return_value=self.client)
        self.signer_provider = mock.MagicMock()

    def get_handler(
        self, settings: Optional[ReplicationSettings] = ReplicationSettings("us-1", "us-2")
    ) -> BackupReplicationHandler:
        dispatcher = ActionDispatcher(
            executors={
                ActionKind.COPY: CopyBootVolumeBackupExecutor(
                    signer_provider=self.signer_provider, client_factory=self.client_factory
                ),
                ActionKind.DELETE: DeleteReplicaExecutor(),
            }
        )
        return BackupReplicationHandler(settings=settings, dispatcher=dispatcher)

    def test__invoke__copies_created_backup(self):
        body = make_event_body(
            event_type=BOOT_VOLUME_BACKUP_CREATED,
            resource_id="ocid1.bootvolumebackup.a",
            resource_name="nightly-1",
        )

        self.assertInvokes(self.get_handler(), body, DONE_MESSAGE)

        self.assertEqual(self.client_factory.call_args.kwargs["config"], {"region": "us-1"})
        self.client.copy_boot_volume_backup.assert_called_once()
        call_kwargs = self.client.copy_boot_volume_backup.call_args.kwargs
        self.assertEqual(call_kwargs["boot_volume_backup_id"], "ocid1.bootvolumebackup.a")
        details = call_kwargs["copy_boot_volume_backup_details"]
        self.assertEqual(details.destination_region, "us-2")
        self.assertEqual(details.display_name, "nightly-1")

    def test__invoke__missing_destination_region_writes_nothing(self):
        handler = self.get_handler(settings=ReplicationSettings("us-1", None))

        self.assertInvokes(handler, make_event_body(), None)

        self.signer_provider.assert_not_called()
        self.client.copy_boot_volume_backup.assert_not_called()

    def test__invoke__deleted_backup_makes_no_remote_call(self):
        body = make_event_body(event_type=BOOT_VOLUME_BACKUP_DELETED)

        self.assertInvokes(self.get_handler(), body, DONE_MESSAGE)

        self.signer_provider.assert_not_called()
        self.client_factory.assert_not_called()

    def test__invoke__unmatched_event_writes_nothing(self):
        self.assertInvokes(self.get_handler(), b'{"eventType": "some.other.event"}', None)

        self.signer_provider.assert_not_called()
        self.client.copy_boot_volume_backup.assert_not_called()

    def test__invoke__remote_failure_writes_nothing(self):
        self.client.copy_boot_volume_backup.side_effect = RuntimeError("rejected")

        self.assertInvokes(self.get_handler(), make_event_body(), None)

        self.client.copy_boot_volume_backup.assert_called_once()

    def test__invoke__malformed_body_writes_nothing(self):
        self.assertInvokes(self.get_handler(), b"{ this is not json", None)

        self.client_factory.assert_not_called()

    def test__invoke__reads_settings_from_invocation_config(self):
        handler = self.get_handler(settings=None)
        context = self.context
        context.config = {"OCI_SOURCE_REGION": "us-3", "OCI_DESTINATION_REGION": "us-4"}

        self.assertInvokes(handler, make_event_body(), DONE_MESSAGE, context=context)

        self.assertEqual(self.client_factory.call_args.kwargs["config"], {"region": "us-3"})
        details = self.client.copy_boot_volume_backup.call_args.kwargs[
            "copy_boot_volume_backup_details"
        ]
        self.assertEqual(details.destination_region, "us-4")

    def test__get_handler__responds_with_acknowledgement(self):
        mock_response = self.create_patch("oci_backup_replicator.common.handler.response")
        ctx = mock_fdk_context(
            config={"OCI_SOURCE_REGION": "us-1", "OCI_DESTINATION_REGION": "us-2"}
        )
        dispatcher = self.get_handler().dispatcher

        handler = BackupReplicationHandler.get_handler(dispatcher=dispatcher)
        handler(ctx, make_event_body())

        mock_response.Response.assert_called_once_with(
            ctx, response_data=DONE_MESSAGE, headers={"Content-Type": "text/plain"}
        )
        self.client.copy_boot_volume_backup.assert_called_once()


@mark.parametrize(
    "path, value",
    [
        (("eventTime",), "Tue, 15 Oct 2019 06:43:28 GMT"),
        (("eventTime",), "2019-10-15T06:43:28.123456789Z"),
        (("eventTypeVersion",), 2.0),
        (("data", "compartmentName"), 5),
        (("data", "definedTags"), []),
        (("data", "additionalDetails"), "n/a"),
        (("extensions",), "x"),
    ],
)
def test__invoke__copies_despite_unexpected_informational_value(path, value):
    document = make_event_document(resource_id="ocid1.bootvolumebackup.a")
    target = document
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value

    client = mock.MagicMock()
    client.copy_boot_volume_backup.return_value.headers = {}
    dispatcher = ActionDispatcher(
        executors={
            ActionKind.COPY: CopyBootVolumeBackupExecutor(
                signer_provider=mock.MagicMock(),
                client_factory=mock.MagicMock(return_value=client),
            ),
        }
    )
    handler = BackupReplicationHandler(
        settings=ReplicationSettings("us-1", "us-2"), dispatcher=dispatcher
    )

    output = handler.invoke(json.dumps(document), InvocationContext(call_id="call"))

    assert output == DONE_MESSAGE
    client.copy_boot_volume_backup.assert_called_once()
    call_kwargs = client.copy_boot_volume_backup.call_args.kwargs
    assert call_kwargs["boot_volume_backup_id"] == "ocid1.bootvolumebackup.a"
