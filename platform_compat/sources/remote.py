"""Remote SDK archive source.

Downloads one SDK archive per platform, expands ``.gz`` streams and extracts
only the shared-framework part of each ``.tar``/``.zip`` container::

    <work>/dotnet-dev-linux-x64.latest.tar.gz
      -> <work>/dotnet-dev-linux-x64.latest/shared/Microsoft.NETCore.App/...
"""

import gzip
import logging
import shutil
import sys
import tarfile
import urllib.error
import urllib.request
import zipfile
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from ..config import DEFAULT_ARCHIVES, DEFAULT_ROOT_URL, ScanConfig
from .base import PlatformSource
from .utils import safe_extract_tar, safe_extract_zip

logger = logging.getLogger(__name__)


def archive_folder_name(archive: Path) -> str:
    """Folder an archive is extracted into.

    Examples:
        'dotnet-dev-win-x64.latest.zip' -> 'dotnet-dev-win-x64.latest'
        'dotnet-dev-osx-x64.latest.tar' -> 'dotnet-dev-osx-x64.latest'
    """
    name = archive.stem
    if name.endswith('.tar'):
        name = name[:-len('.tar')]
    return name


class RemoteSource(PlatformSource):
    """Adapter for SDK archives published under a common root URL."""

    def __init__(self, root_url: str = DEFAULT_ROOT_URL,
                 archives: Optional[Sequence[str]] = None,
                 framework_prefixes: Optional[Sequence[str]] = None):
        """Initialize remote source.

        Args:
            root_url: Base URL the archive names are appended to
            archives: Archive file names, one per platform
            framework_prefixes: Archive entry prefixes to extract
                (default: the shared framework folder)
        """
        parsed = urlparse(root_url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(
                f"Invalid root_url scheme '{parsed.scheme}'. "
                f"Only http:// and https:// are supported."
            )
        self.root_url = root_url if root_url.endswith('/') else root_url + '/'
        self.archives: List[str] = list(archives if archives is not None else DEFAULT_ARCHIVES)
        self.framework_prefixes: List[str] = list(
            framework_prefixes or ScanConfig().framework_prefixes
        )

    @classmethod
    def from_config(cls, config: ScanConfig) -> "RemoteSource":
        return cls(config.root_url, config.archives, config.framework_prefixes)

    def prepare(self, work_dir: Path) -> Path:
        work_dir.mkdir(parents=True, exist_ok=True)
        self.download(work_dir)
        self.extract(work_dir)
        return work_dir

    def download(self, work_dir: Path) -> List[Path]:
        """Download every archive into ``work_dir``."""
        print("Downloading files...", file=sys.stderr)
        downloaded = []
        for archive in self.archives:
            url = self.root_url + archive
            output_file = work_dir / archive
            print(f"  {archive}", file=sys.stderr)
            try:
                urllib.request.urlretrieve(url, output_file)
            except (urllib.error.URLError, urllib.error.HTTPError) as e:
                raise RuntimeError(f"Failed to download {url}: {e}") from e
            downloaded.append(output_file)
        return downloaded

    def extract(self, work_dir: Path) -> List[Path]:
        """Expand gzip streams, then extract archives (deleting them)."""
        print("Extracting files...", file=sys.stderr)
        expand_gzip_streams(work_dir)
        return extract_archives(work_dir, self.framework_prefixes)


def expand_gzip_streams(directory: Path) -> List[Path]:
    """Replace every ``*.gz`` file in ``directory`` by its decompressed content."""
    expanded = []
    for gz_file in sorted(directory.glob('*.gz')):
        print(f"  {gz_file.name}", file=sys.stderr)
        target = directory / gz_file.stem
        try:
            with gzip.open(gz_file, 'rb') as src, open(target, 'wb') as dst:
                shutil.copyfileobj(src, dst)
        except (OSError, EOFError) as e:
            target.unlink(missing_ok=True)
            raise RuntimeError(f"Failed to decompress {gz_file}: {e}") from e
        gz_file.unlink()
        expanded.append(target)
    return expanded


def extract_archives(directory: Path, prefixes: Sequence[str]) -> List[Path]:
    """Extract every archive file in ``directory`` into a sibling folder.

    Raises:
        ValueError: For an unknown container type
        RuntimeError: If an archive holds no entry under ``prefixes``
    """
    extracted = []
    for archive in sorted(p for p in directory.iterdir() if p.is_file()):
        print(f"  {archive.name}", file=sys.stderr)
        target = directory / archive_folder_name(archive)
        suffix = archive.suffix.lower()

        if suffix == '.tar':
            with tarfile.open(archive) as tar:
                selected = safe_extract_tar(tar, target, prefixes)
        elif suffix == '.zip':
            with zipfile.ZipFile(archive) as zf:
                selected = safe_extract_zip(zf, target, prefixes)
        else:
            raise ValueError(f"Unknown archive type: {archive.name}")

        if not selected:
            raise RuntimeError(
                f"No entries under {prefixes[0]} in {archive.name} at {directory}"
            )
        logger.debug("Extracted %d entries from %s", selected, archive.name)

        archive.unlink()
        extracted.append(target)
    return extracted
