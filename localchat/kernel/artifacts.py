"""
Defines the contracts for locating model artifacts.

This is a core part of the Kernel. It defines the 'port' for which
storage adapters must be provided.
"""
from abc import abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol


@dataclass(frozen=True)
class ModelArtifact:
    """
    A model weight file on disk, identified solely by its extension.
    Discovered by polling, never mutated.
    """
    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def extension(self) -> str:
        return self.path.suffix.lstrip(".").lower()

    def __str__(self) -> str:
        return str(self.path)


class ArtifactLocator(Protocol):
    """
    The interface (port) for any system that can find a model artifact
    in a directory.
    """

    @abstractmethod
    def locate(self, directory: Path) -> Optional[ModelArtifact]:
        """
        Returns the first recognized artifact in `directory`, in listing order,
        or None. A missing directory counts as an empty one.
        """
        ...
