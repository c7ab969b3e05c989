from oci_backup_replicator.handlers.backup_replication.handler import handler  # noqa: F401
