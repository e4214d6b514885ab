"""Local platform runtime source."""

from pathlib import Path
from typing import Union

from .base import PlatformSource


class LocalSource(PlatformSource):
    """Adapter for runtimes already extracted on disk.

    Unlike the remote source, nothing is downloaded; the directory is
    validated and returned as-is.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser().resolve()

    def prepare(self, work_dir: Path) -> Path:
        if not self.path.exists():
            raise FileNotFoundError(f"Source path not found: {self.path}")
        if not self.path.is_dir():
            raise ValueError(f"Source path is not a directory: {self.path}")
        return self.path
