"""
Adapter probing.

A model binding is an opaque callable whose constructor and setup methods vary
between implementations. The prober walks two explicit strategy lists, one for
construction and one for initialization, and reports a tagged outcome instead
of raising.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional

from localchat.engine.base import ModelHandle, call_binding, find_capability
from localchat.engine.factory import BindingFactory
from localchat.internal.logging import get_logger
from localchat.kernel.artifacts import ModelArtifact
from localchat.kernel.contracts import ProbeFailure, ProbeOutcome, ProbeSuccess
from localchat.kernel.errors import (
    BindingUnavailable,
    ConstructionFailed,
    InitializationFailed,
    LocalChatError,
)

logger = get_logger(__name__)

# A calling convention maps an artifact to (args, kwargs).
CallingConvention = Callable[[ModelArtifact], tuple[tuple, dict]]


@dataclass(frozen=True)
class ConstructionStrategy:
    name: str
    convention: CallingConvention


@dataclass(frozen=True)
class InitializationStrategy:
    capability: str
    conventions: tuple[CallingConvention, ...]


def _with_path(artifact: ModelArtifact):
    return (str(artifact.path),), {}


def _without_args(artifact: ModelArtifact):
    return (), {}


def _name_in_directory(artifact: ModelArtifact):
    return (artifact.name,), {"model_path": str(artifact.directory)}


CONSTRUCTION_STRATEGIES = (
    ConstructionStrategy("path", _with_path),
    ConstructionStrategy("bare", _without_args),
)

# First capability present wins; its conventions are tried in order.
INITIALIZATION_STRATEGIES = (
    InitializationStrategy("init", (_without_args,)),
    InitializationStrategy("load", (_with_path, _name_in_directory)),
    InitializationStrategy("open", (_with_path,)),
)


class AdapterProber:
    """
    Constructs and initializes a binding against a located artifact.

    `binding` is the constructor to probe. When omitted it is resolved from
    `binding_name` on every probe, so a binding installed after startup is
    picked up by the next retry.
    """

    def __init__(
        self,
        binding: Optional[Callable] = None,
        binding_name: Optional[str] = None,
        construction_strategies=CONSTRUCTION_STRATEGIES,
        initialization_strategies=INITIALIZATION_STRATEGIES,
    ):
        if binding is None and binding_name is None:
            raise ValueError("either binding or binding_name is required")
        self._binding = binding
        self._binding_name = binding_name
        self._construction_strategies = construction_strategies
        self._initialization_strategies = initialization_strategies

    async def probe(self, artifact: ModelArtifact) -> ProbeOutcome:
        logger.info("Probing model binding", artifact=str(artifact), binding=self._binding_label)
        try:
            binding = self._resolve_binding()
            instance, construction = await self._construct(binding, artifact)
            initialization = await self._initialize(instance, artifact)
        except LocalChatError as e:
            return ProbeFailure(artifact=artifact, error=e)
        except Exception as e:
            return ProbeFailure(artifact=artifact, error=InitializationFailed("Unexpected probe failure", e))

        handle = ModelHandle(
            instance=instance,
            artifact=artifact,
            construction=construction,
            initialization=initialization,
        )
        logger.info("Model binding initialized", **handle.describe())
        return ProbeSuccess(handle=handle)

    @property
    def _binding_label(self) -> str:
        if self._binding_name:
            return self._binding_name
        return getattr(self._binding, "__name__", repr(self._binding))

    def _resolve_binding(self) -> Callable:
        if self._binding is not None:
            return self._binding
        try:
            return BindingFactory.resolve(self._binding_name)
        except BindingUnavailable:
            raise
        except Exception as e:
            raise BindingUnavailable(f"Failed to resolve binding {self._binding_name!r}: {e!r}") from e

    async def _construct(self, binding: Callable, artifact: ModelArtifact) -> tuple[Any, str]:
        last_error: Optional[BaseException] = None
        for strategy in self._construction_strategies:
            args, kwargs = strategy.convention(artifact)
            try:
                instance = await call_binding(binding, *args, **kwargs)
            except Exception as e:
                logger.debug("Construction strategy failed", strategy=strategy.name, error=repr(e))
                last_error = e
                continue
            if instance is not None:
                return instance, strategy.name
        raise ConstructionFailed("Unable to construct model instance", last_error)

    async def _initialize(self, instance: Any, artifact: ModelArtifact) -> Optional[str]:
        for strategy in self._initialization_strategies:
            method = find_capability(instance, strategy.capability)
            if method is None:
                continue

            last_error: Optional[BaseException] = None
            for convention in strategy.conventions:
                args, kwargs = convention(artifact)
                try:
                    await call_binding(method, *args, **kwargs)
                    return strategy.capability
                except Exception as e:
                    logger.debug("Initialization call failed", capability=strategy.capability, error=repr(e))
                    last_error = e
            raise InitializationFailed(f"'{strategy.capability}' failed", last_error)

        logger.info("Binding exposes no init/load/open; skipping initialization")
        return None
