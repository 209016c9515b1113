import logging
import sys

import pytest
from fastapi.testclient import TestClient

from code_runner.core.config import Settings
from code_runner.main import create_app


@pytest.fixture
def logger():
    return logging.getLogger("code_runner.tests")


@pytest.fixture
def workspace_root(tmp_path):
    return tmp_path / "temp"


@pytest.fixture
def settings(workspace_root):
    """Settings isolated from the environment, with this interpreter as `python`."""
    return Settings(
        _env_file=None,
        WORKSPACE_ROOT=workspace_root,
        EXECUTION_TIMEOUT_SECONDS=10,
        PYTHON_COMMAND=sys.executable,
    )


@pytest.fixture
def app(settings, logger):
    return create_app(settings, logger)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def leftovers(workspace_root):
    """Callable listing workspace directories still on disk."""
    def _list():
        if not workspace_root.exists():
            return []
        return list(workspace_root.iterdir())
    return _list
