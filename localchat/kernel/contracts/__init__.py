from localchat.kernel.artifacts import ArtifactLocator, ModelArtifact
from localchat.kernel.contracts.contracts import (
    HistoryStore,
    ProbeFailure,
    ProbeOutcome,
    ProbeSuccess,
)

__all__ = [
    "ArtifactLocator",
    "HistoryStore",
    "ModelArtifact",
    "ProbeFailure",
    "ProbeOutcome",
    "ProbeSuccess",
]
