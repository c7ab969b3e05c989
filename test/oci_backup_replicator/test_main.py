import json
from test.base import BaseTest
from test.oci_backup_replicator.base import make_event_body, make_event_document

import pytest

from oci_backup_replicator.handlers.backup_replication.model import (
    BOOT_VOLUME_BACKUP_DELETED,
    ReplicationSettings,
)
from oci_backup_replicator.main import REPLICATOR_EVENT_PAYLOAD_KEY, handle, handle_cli


class TestMain(BaseTest):
    def setUp(self) -> None:
        super().setUp()
        self.set_region_env_vars()
        self.mock_handle = self.create_patch("oci_backup_replicator.main.handle")
        self.mock_handle.return_value = "Done!"
        self.payload = json.dumps(make_event_document())

    def test__handle_cli__resolves_payload_from_arguments(self):
        handle_cli(["--payload", self.payload])

        self.mock_handle.assert_called_once_with(
            self.payload,
            settings=ReplicationSettings(self.SOURCE_REGION, self.DESTINATION_REGION),
        )

    def test__handle_cli__resolves_payload_from_env(self):
        self.set_env_vars((REPLICATOR_EVENT_PAYLOAD_KEY, self.payload))

        handle_cli([])

        self.assertEqual(self.mock_handle.call_args.args[0], self.payload)

    def test__handle_cli__region_arguments_override_env(self):
        handle_cli(["--payload", self.payload, "--destination-region", "eu-frankfurt-1"])

        self.assertEqual(
            self.mock_handle.call_args.kwargs["settings"],
            ReplicationSettings(self.SOURCE_REGION, "eu-frankfurt-1"),
        )

    def test__handle_cli__fails__no_payload(self):
        with self.assertRaises(ValueError):
            handle_cli([])


@pytest.mark.usefixtures("replication_env_fixture")
def test__handle__acknowledges_deleted_backup():
    body = make_event_body(event_type=BOOT_VOLUME_BACKUP_DELETED).decode("utf-8")
    assert handle(body) == "Done!"


@pytest.mark.usefixtures("replication_env_fixture")
def test__handle__unmatched_event_returns_nothing():
    assert handle('{"eventType": "some.other.event"}') is None


@pytest.mark.usefixtures("replication_env_fixture")
def test__handle_cli__resolves_payload_from_file(tmp_path, capsys):
    path = tmp_path / "event.json"
    path.write_text(make_event_body(event_type=BOOT_VOLUME_BACKUP_DELETED).decode("utf-8"))

    handle_cli(["--payload-file", str(path)])

    assert capsys.readouterr().out.endswith("Done!")
