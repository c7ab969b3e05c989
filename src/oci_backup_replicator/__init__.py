"""OCI boot volume backup replicator.

Provides an OCI Functions handler that reacts to block volume lifecycle
events by copying newly created boot volume backups into a second region.
"""
