import os
from unittest import mock

import pytest


@pytest.fixture(scope="function")
def replication_env_fixture():
    """Set replication settings and avoid accidentally picking up
    a real OCI configuration from the developer's environment.
    """
    # Clear os.environ dict (will be restored after fixture is finished)
    with mock.patch.dict(os.environ, clear=True):
        os.environ["OCI_SOURCE_REGION"] = "us-ashburn-1"
        os.environ["OCI_DESTINATION_REGION"] = "us-phoenix-1"
        yield
