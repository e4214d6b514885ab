"""Platform runtime sources.

Provides the directory tree the scanner runs over:
- Remote SDK archives (downloaded and extracted into a work directory)
- Local, already extracted runtimes
"""

from .base import PlatformSource
from .remote import RemoteSource
from .local import LocalSource
from .factory import create_source

__all__ = [
    'PlatformSource',
    'RemoteSource',
    'LocalSource',
    'create_source',
]
