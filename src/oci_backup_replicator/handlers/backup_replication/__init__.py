"""Replication of boot volume backups across regions."""
