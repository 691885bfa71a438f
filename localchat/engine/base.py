import asyncio
import functools
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from localchat.kernel.artifacts import ModelArtifact


async def call_binding(fn: Callable, *args, **kwargs) -> Any:
    """
    Run a binding call off the event loop.
    Bindings may be blocking or async; an awaitable result is awaited.
    """
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))
    if inspect.isawaitable(result):
        result = await result
    return result


def find_capability(instance: Any, name: str) -> Optional[Callable]:
    """
    Returns the callable registered under `name` on a binding instance, or None.

    `call` also resolves to the instance itself when the instance is callable,
    which is how Python bindings usually spell it.
    """
    member = getattr(instance, name, None)
    if callable(member):
        return member
    if name == "call" and callable(instance) and not isinstance(instance, type):
        return instance
    return None


@dataclass(frozen=True)
class ModelHandle:
    """
    An initialized model.

    The wrapped binding instance is owned by the lifecycle manager and only
    ever invoked by request handlers, never mutated. Whether it tolerates
    concurrent invocations depends on the binding; see
    `RuntimeConfig.serialize_inference`.
    """
    instance: Any
    artifact: ModelArtifact
    construction: str
    initialization: Optional[str] = None

    def capability(self, name: str) -> Optional[Callable]:
        return find_capability(self.instance, name)

    def describe(self) -> dict:
        return {
            "artifact": self.artifact.name,
            "binding": type(self.instance).__name__,
            "construction": self.construction,
            "initialization": self.initialization,
        }
