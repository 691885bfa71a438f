"""
This module defines the request-side service of the localchat kernel.
It turns a prompt into a reply through the published model handle and hands
the exchange to the history store.
"""
import asyncio
from typing import Optional

from localchat.engine.normalizer import infer
from localchat.internal.logging import get_logger
from localchat.kernel.contracts import HistoryStore
from localchat.kernel.state import ModelState

logger = get_logger(__name__)


class ChatService:
    """
    Stable `generate(prompt) -> text` contract over whatever binding is loaded.

    ModelUnavailable is raised, not retried, while the model is initializing.
    With `serialize_inference` concurrent prompts are run one at a time, for
    bindings that are not safe to call from several threads.
    """

    def __init__(self, state: ModelState, history: Optional[HistoryStore] = None, serialize_inference: bool = False):
        self.state = state
        self.history = history
        self._lock: Optional[asyncio.Lock] = asyncio.Lock() if serialize_inference else None

    async def generate(self, prompt: str) -> str:
        handle = self.state.require_handle()
        if self._lock is None:
            return await infer(handle, prompt)
        async with self._lock:
            return await infer(handle, prompt)

    async def reply(self, user_id: str, prompt: str) -> str:
        text = await self.generate(prompt)
        if self.history is not None:
            await self.history.append_history(user_id, prompt, text)
        logger.info("Reply generated", user_id=user_id, prompt_chars=len(prompt), reply_chars=len(text))
        return text
