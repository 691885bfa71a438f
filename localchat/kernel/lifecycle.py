"""
This module defines the model lifecycle of the localchat kernel:
wait for an artifact, probe the binding against it, publish the handle.

It runs as a background asyncio task next to request handling and only
suspends while waiting out the poll interval or awaiting the prober.
"""
import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional

from localchat.engine.probe import AdapterProber
from localchat.internal.logging import get_logger
from localchat.kernel.artifacts import ArtifactLocator, ModelArtifact
from localchat.kernel.errors import ArtifactNotFound
from localchat.kernel.state import ModelState

logger = get_logger(__name__)


class ModelLifecycleManager:
    """
    Searching -> Ready.

    While searching, the models directory is polled every `poll_interval`
    seconds, forever. A successful probe publishes the handle into `state`
    and ends the task; Ready is terminal.

    A failed probe keeps the state initializing. With `retry_failed_probe`
    the manager waits one poll interval and starts a new discovery cycle;
    without it the manager stops and the artifact is considered unusable
    until the service restarts.
    """

    def __init__(
        self,
        state: ModelState,
        locator: ArtifactLocator,
        prober: AdapterProber,
        models_dir: Path,
        poll_interval: float = 2.0,
        retry_failed_probe: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.state = state
        self.locator = locator
        self.prober = prober
        self.models_dir = Path(models_dir)
        self.poll_interval = poll_interval
        self.retry_failed_probe = retry_failed_probe
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.attempts = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Schedule the search loop on the running event loop. Idempotent."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run(), name="localchat-model-lifecycle")
        return self._task

    async def stop(self) -> None:
        """Cancel the search loop, if it is still running."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Model lifecycle stopped", ready=self.state.is_ready)

    async def run(self) -> None:
        if self.state.is_ready:
            return

        logger.info("Waiting for model file", directory=str(self.models_dir), poll_interval=self.poll_interval)
        while True:
            try:
                artifact = self._search_once()
            except ArtifactNotFound:
                await self._sleep(self.poll_interval)
                continue

            if await self._initialize(artifact):
                return

            if not self.retry_failed_probe:
                logger.warning(
                    "Model stays unavailable until restart",
                    artifact=str(artifact),
                    hint="set LOCALCHAT_RETRY_FAILED_PROBE=true to keep retrying",
                )
                return
            await self._sleep(self.poll_interval)

    def _search_once(self) -> ModelArtifact:
        artifact = self.locator.locate(self.models_dir)
        if artifact is None:
            raise ArtifactNotFound(self.models_dir)
        logger.info("Model file found", artifact=str(artifact))
        return artifact

    async def _initialize(self, artifact: ModelArtifact) -> bool:
        self.attempts += 1
        outcome = await self.prober.probe(artifact)
        if not outcome.ok:
            # Nothing partial is kept: only a successful probe yields a handle.
            logger.error(
                "Failed to initialize model",
                artifact=str(artifact),
                attempt=self.attempts,
                error=str(outcome.error),
                error_type=type(outcome.error).__name__,
            )
            return False

        self.state.publish(outcome.handle)
        logger.info("Model ready", **outcome.handle.describe())
        return True
