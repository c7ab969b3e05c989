"""Local runner for the backup replication handler.

Runs one invocation outside of OCI Functions, reading the event from an
argument, a file, standard input or the ``REPLICATOR_EVENT_PAYLOAD``
environment variable.

Example:
    ```bash
    OCI_SOURCE_REGION=us-ashburn-1 OCI_DESTINATION_REGION=us-phoenix-1 \\
        python -m oci_backup_replicator.main --payload-file event.json
    ```
"""

import argparse
import sys
from typing import List, Optional, Sequence

from aibs_informatics_core.utils.os_operations import get_env_var

from oci_backup_replicator.common.models import DefaultInvocationContext
from oci_backup_replicator.handlers.backup_replication.handler import BackupReplicationHandler
from oci_backup_replicator.handlers.backup_replication.model import (
    DESTINATION_REGION_KEY,
    SOURCE_REGION_KEY,
    ReplicationSettings,
)

REPLICATOR_EVENT_PAYLOAD_KEY = "REPLICATOR_EVENT_PAYLOAD"


def handle(
    payload: str, settings: Optional[ReplicationSettings] = None
) -> Optional[str]:
    """Run a single invocation of the replication handler.

    Args:
        payload (str): The raw event document.
        settings (Optional[ReplicationSettings]): Replication settings. Read from the
            environment if None.

    Returns:
        The invocation output, or None if nothing was written.
    """
    function_handler = BackupReplicationHandler(settings=settings)
    function_handler.add_logger_to_root()
    return function_handler.invoke(payload, DefaultInvocationContext())


def read_payload(args: argparse.Namespace) -> str:
    if args.payload is not None:
        return args.payload
    if args.payload_file == "-":
        return sys.stdin.read()
    if args.payload_file is not None:
        with open(args.payload_file, "r") as f:
            return f.read()
    payload = get_env_var(REPLICATOR_EVENT_PAYLOAD_KEY)
    if payload is None:
        raise ValueError(
            "No event payload given. Use --payload, --payload-file "
            f"or set {REPLICATOR_EVENT_PAYLOAD_KEY}"
        )
    return payload


def handle_cli(args: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(description="Replicate a boot volume backup locally.")
    payload_group = parser.add_mutually_exclusive_group()
    payload_group.add_argument("--payload", "-p", help="Event document as a JSON string")
    payload_group.add_argument(
        "--payload-file", "-f", help="Path of a file holding the event document, or - for stdin"
    )
    parser.add_argument(
        "--source-region", help=f"Source region. Overrides {SOURCE_REGION_KEY}"
    )
    parser.add_argument(
        "--destination-region", help=f"Destination region. Overrides {DESTINATION_REGION_KEY}"
    )
    parsed = parser.parse_args(args)

    payload = read_payload(parsed)
    env_settings = ReplicationSettings.from_env()
    settings = ReplicationSettings(
        source_region=parsed.source_region or env_settings.source_region,
        destination_region=parsed.destination_region or env_settings.destination_region,
    )

    output = handle(payload, settings=settings)
    if output:
        sys.stdout.write(output)


def main(argv: Optional[List[str]] = None):
    handle_cli(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    main()
