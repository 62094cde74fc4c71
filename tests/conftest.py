"""Pytest configuration and fixtures for imgbatch tests"""
import json
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from imgbatch.auth import AuthConfig
from imgbatch.engine import EngineClient


def messages(*texts, key="stream"):
    """Encode progress messages the way the engine streams them"""
    return [json.dumps({key: t}).encode("utf-8") + b"\r\n" for t in texts]


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_dockerfile(temp_dir):
    """Write a Dockerfile into its own sub directory and return its path"""
    def _make(subdir, content):
        d = temp_dir / subdir
        d.mkdir(parents=True, exist_ok=True)
        path = d / "Dockerfile"
        path.write_text(content)
        return path
    return _make


@pytest.fixture
def api():
    """Provide a mock low-level Docker API client"""
    return MagicMock()


@pytest.fixture
def engine(api):
    """Provide an EngineClient backed by the mock API"""
    return EngineClient(api, AuthConfig(username="ci", password="secret", email="ci@example.com",
                                        server_address="registry.example.com"))
