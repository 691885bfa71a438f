import asyncio

import pytest
import structlog

from localchat.engine.base import ModelHandle
from localchat.kernel.artifacts import ModelArtifact


@pytest.fixture(autouse=True)
def reset_structlog():
    """Each test starts from structlog's defaults."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def models_dir(tmp_path):
    """An empty directory watched for model files."""
    path = tmp_path / "models"
    path.mkdir()
    return path


@pytest.fixture
def artifact(models_dir):
    path = models_dir / "tiny-model.gguf"
    path.write_bytes(b"GGUF")
    return ModelArtifact(path=path)


@pytest.fixture
def make_handle(artifact):
    def _make(instance, construction="path", initialization=None):
        return ModelHandle(
            instance=instance,
            artifact=artifact,
            construction=construction,
            initialization=initialization,
        )
    return _make


@pytest.fixture
def run():
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run
