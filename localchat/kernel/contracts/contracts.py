from dataclasses import dataclass
from typing import Protocol, Union

from localchat.engine.base import ModelHandle
from localchat.kernel.artifacts import ModelArtifact
from localchat.kernel.errors import LocalChatError


@dataclass(frozen=True)
class ProbeSuccess:
    """
    The binding was constructed and initialized against the artifact.
    """
    handle: ModelHandle

    ok = True


@dataclass(frozen=True)
class ProbeFailure:
    """
    Every construction or initialization strategy failed.
    `error` carries the underlying cause; the prober never raises it.
    """
    artifact: ModelArtifact
    error: LocalChatError

    ok = False


ProbeOutcome = Union[ProbeSuccess, ProbeFailure]


class HistoryStore(Protocol):
    """
    Defines the contract for persisting per-user conversation history.
    The Kernel hands every successful reply to this collaborator.
    """

    async def append_history(self, user_id: str, prompt: str, reply: str) -> None:
        ...

    async def get_history(self, user_id: str) -> list[dict]:
        ...
