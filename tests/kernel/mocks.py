import asyncio
from typing import Callable, List, Optional

from localchat.engine.base import ModelHandle
from localchat.kernel.contracts import ProbeFailure, ProbeSuccess
from localchat.kernel.errors import InitializationFailed


class RecordingSleep:
    """
    Replaces asyncio.sleep in the lifecycle manager.
    Records every wait and runs `on_sleep(n)` before the n-th wait returns.
    """

    def __init__(self, on_sleep: Optional[Callable[[int], None]] = None):
        self.calls: List[float] = []
        self.on_sleep = on_sleep

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.on_sleep:
            self.on_sleep(len(self.calls))
        await asyncio.sleep(0)


class ScriptedProber:
    """A prober that fails `failures` times before succeeding with `instance`."""

    def __init__(self, instance=None, failures: int = 0):
        self.instance = instance if instance is not None else object()
        self.failures = failures
        self.probed = []

    async def probe(self, artifact):
        self.probed.append(artifact)
        if len(self.probed) <= self.failures:
            return ProbeFailure(artifact=artifact, error=InitializationFailed("scripted failure"))
        return ProbeSuccess(handle=ModelHandle(instance=self.instance, artifact=artifact, construction="path"))
