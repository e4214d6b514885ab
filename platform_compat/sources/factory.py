"""Factory for creating platform sources."""

from pathlib import Path
from typing import Optional, Union

from ..config import ScanConfig
from .base import PlatformSource
from .local import LocalSource
from .remote import RemoteSource


def create_source(source_path: Optional[Union[str, Path]] = None,
                  config: Optional[ScanConfig] = None) -> PlatformSource:
    """Create the PlatformSource for a run.

    Mapping:
    - source_path given -> LocalSource(source_path)
    - otherwise         -> RemoteSource from config (root_url + archives)
    """
    if source_path is not None:
        return LocalSource(source_path)
    return RemoteSource.from_config(config or ScanConfig())
