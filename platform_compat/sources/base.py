"""Base interface for platform runtime sources."""

from abc import ABC, abstractmethod
from pathlib import Path


class PlatformSource(ABC):
    """Abstract base class for platform runtime sources.

    Each source (remote, local) implements this interface.
    """

    @abstractmethod
    def prepare(self, work_dir: Path) -> Path:
        """Materialize the platform runtimes.

        Args:
            work_dir: Scratch directory owned by the caller; removed after
                the run, so sources must not return data they expect to keep

        Returns:
            Directory with one extracted platform runtime per subdirectory

        Raises:
            RuntimeError: If downloading or extraction fails
        """
        pass
