"""
Single-call inference against a heterogeneous binding.

Bindings disagree on the name of their inference method and on what it returns.
`infer` calls the first recognized method a handle exposes and
`normalize_result` turns whatever comes back into text.
"""
from collections.abc import Mapping
from typing import Any, Optional

from localchat.engine.base import ModelHandle, call_binding
from localchat.internal.logging import get_logger
from localchat.kernel.errors import (
    InferenceInvocationFailed,
    ModelUnavailable,
    NoInferenceMethod,
)

logger = get_logger(__name__)

INFERENCE_CAPABILITIES = (
    "prompt",
    "generate",
    "call",
    "chat",
    "predict",
    "ask",
    "completion",
)


def _field(raw: Any, name: str) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name)
    return getattr(raw, name, None)


def _choice_text(raw: Any) -> Optional[str]:
    """`choices[0].text` of an OpenAI-style completion, if present."""
    choices = _field(raw, "choices")
    if isinstance(choices, (list, tuple)) and choices:
        text = _field(choices[0], "text")
        if isinstance(text, str):
            return text
    return None


def normalize_result(raw: Any, capability: Optional[str] = None) -> str:
    """
    Coerce a raw inference result to text.

    Precedence: str, bytes, `choices[0].text` (generate only), `.text`,
    `.output`, first element of a non-empty list/tuple, `str(raw)`.
    """
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")

    if capability == "generate":
        text = _choice_text(raw)
        if text is not None:
            return text

    for name in ("text", "output"):
        value = _field(raw, name)
        if isinstance(value, str):
            return value

    if isinstance(raw, (list, tuple)) and raw:
        return str(raw[0])
    return str(raw)


async def infer(handle: Optional[ModelHandle], prompt: str) -> str:
    if handle is None:
        raise ModelUnavailable("Model not initialized")
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValueError("prompt must be a non-empty string")

    tried = []
    for name in INFERENCE_CAPABILITIES:
        method = handle.capability(name)
        if method is None:
            continue

        tried.append(name)
        try:
            raw = await call_binding(method, prompt)
        except Exception as e:
            raise InferenceInvocationFailed(name, e) from e

        if raw is None:
            # A miss: let the next exposed method have a go.
            logger.debug("Inference capability returned nothing", capability=name)
            continue
        return normalize_result(raw, capability=name)

    if not tried:
        raise NoInferenceMethod(
            f"{type(handle.instance).__name__} exposes none of: {', '.join(INFERENCE_CAPABILITIES)}"
        )
    raise InferenceInvocationFailed(
        tried[-1],
        message=f"Inference returned no result (tried: {', '.join(tried)})",
    )
