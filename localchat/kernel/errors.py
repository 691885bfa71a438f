"""
Error taxonomy of the localchat kernel.

Discovery and probing errors are contained by the lifecycle manager and only
logged. Inference errors propagate to the immediate caller.
"""


class LocalChatError(Exception):
    """Base class for every error raised by localchat."""


class ArtifactNotFound(LocalChatError):
    """No recognized model file in the watched directory. Transient."""

    def __init__(self, directory):
        super().__init__(f"No model artifact found in {directory}")
        self.directory = directory


class BindingUnavailable(LocalChatError):
    """The model binding could not be imported or resolved."""


class ProbeError(LocalChatError):
    """A probe phase failed. `cause` is the underlying binding error."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message if cause is None else f"{message}: {cause!r}")
        self.cause = cause


class ConstructionFailed(ProbeError):
    pass


class InitializationFailed(ProbeError):
    pass


class ModelUnavailable(LocalChatError):
    """No model handle is published yet. Expected while initializing."""


class NoInferenceMethod(LocalChatError):
    """The handle exposes none of the recognized inference capabilities."""


class InferenceInvocationFailed(LocalChatError):
    def __init__(self, capability: str | None, cause: BaseException | None = None, message: str | None = None):
        message = message or f"Inference via '{capability}' failed"
        super().__init__(message if cause is None else f"{message}: {cause!r}")
        self.capability = capability
        self.cause = cause


class UserExists(LocalChatError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
