import asyncio
from enum import Enum
from typing import Optional

from localchat.engine.base import ModelHandle
from localchat.kernel.errors import ModelUnavailable


class ReadinessState(str, Enum):
    INITIALIZING = "initializing"
    READY = "ready"


class ModelState:
    """
    Holds the published model handle.

    Single writer (the lifecycle manager calls `publish` exactly once), many
    readers (request handlers). Readiness is derived from the handle, so the
    two can never disagree, and once ready it stays ready for the lifetime of
    this object.
    """

    def __init__(self):
        self._handle: Optional[ModelHandle] = None
        self._ready = asyncio.Event()

    @property
    def handle(self) -> Optional[ModelHandle]:
        return self._handle

    @property
    def readiness(self) -> ReadinessState:
        return ReadinessState.READY if self._handle is not None else ReadinessState.INITIALIZING

    @property
    def is_ready(self) -> bool:
        return self._handle is not None

    def publish(self, handle: ModelHandle) -> None:
        if handle is None:
            raise ValueError("cannot publish an empty handle")
        if self._handle is not None:
            raise RuntimeError("a model handle has already been published")
        self._handle = handle
        self._ready.set()

    def require_handle(self) -> ModelHandle:
        if self._handle is None:
            raise ModelUnavailable("Model not loaded yet")
        return self._handle

    async def wait_ready(self, timeout: Optional[float] = None) -> bool:
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def snapshot(self) -> dict:
        return {
            "modelReady": self.is_ready,
            "status": self.readiness.value,
            "artifact": self._handle.artifact.name if self._handle else None,
        }
