"""Function handler implementations.

Contains the handlers deployed as OCI Functions:
- Boot volume backup replication
"""
