"""Per-platform scan orchestration.

The source root holds one extracted runtime per subdirectory, e.g.::

    <root>/dotnet-dev-linux-x64.latest/shared/Microsoft.NETCore.App/2.0.0-preview3/*.dll
    <root>/dotnet-dev-win-x64.latest/shared/Microsoft.NETCore.App/2.0.0-preview3/*.dll

Each subdirectory becomes a platform label ("linux", "win") and every
observation made in its framework directory is recorded under that label.
"""

import logging
import re
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Sequence

from .config import ScanConfig
from .database import Database
from .scanner import SymbolScanner

logger = logging.getLogger(__name__)


class PlatformDirectory(NamedTuple):
    platform: str
    root: Path
    framework_dir: Path


def platform_label(root: Path, pattern: str) -> str:
    """Map a platform directory to its label.

    The directory name is matched first, so parent directories of the
    source root cannot decide the label; the full path is tried next.

    Examples (default pattern):
        '.../dotnet-dev-osx-x64.latest' -> 'osx'
        '.../custom-runtime'            -> '.../custom-runtime' (no match)
    """
    for candidate in (root.name, str(root)):
        match = re.search(pattern, candidate)
        if match and match.groups() and match.group(1):
            return match.group(1)
    return str(root)


def resolve_framework_directory(root: Path, framework_subpath: str, version_glob: str) -> Path:
    """Return the single framework directory under ``root``.

    Raises:
        ValueError: If the framework folder is missing or ``version_glob``
            matches zero or several directories
    """
    framework = root / framework_subpath
    if not framework.is_dir():
        raise ValueError(f"Shared framework folder not found: {framework}")

    matches = sorted(p for p in framework.glob(version_glob) if p.is_dir())
    if not matches:
        raise ValueError(f"No framework directory matching '{version_glob}' in {framework}")
    if len(matches) > 1:
        names = ", ".join(p.name for p in matches)
        raise ValueError(
            f"Ambiguous framework directory for '{version_glob}' in {framework}: {names}"
        )
    return matches[0]


def enumerate_platform_directories(source_root: Path,
                                   config: Optional[ScanConfig] = None) -> Iterator[PlatformDirectory]:
    """Yield one PlatformDirectory per subdirectory of ``source_root``."""
    config = config or ScanConfig()
    source_root = Path(source_root)
    if not source_root.is_dir():
        raise FileNotFoundError(f"Source directory not found: {source_root}")

    for root in sorted(p for p in source_root.iterdir() if p.is_dir()):
        framework_dir = resolve_framework_directory(
            root, config.framework_subpath, config.framework_version
        )
        yield PlatformDirectory(platform_label(root, config.platform_pattern), root, framework_dir)


def find_binaries(directory: Path, patterns: Sequence[str] = ("*.dll",)) -> List[Path]:
    """Binaries directly inside ``directory`` matching any of ``patterns``."""
    binaries = set()
    for pattern in patterns:
        binaries.update(p for p in directory.glob(pattern) if p.is_file())
    return sorted(binaries)


def scan_platform(entry: PlatformDirectory, database: Database, scanner: SymbolScanner,
                  patterns: Sequence[str] = ("*.dll",)) -> int:
    """Scan every binary of one platform into ``database``.

    Returns:
        Number of observations reported by the scanner
    """
    count = 0
    for binary in find_binaries(entry.framework_dir, patterns):
        for observation in scanner.scan(binary):
            database.add_identity(observation.identity, entry.platform)
            count += 1
    logger.debug("%s: %d observations", entry.platform, count)
    return count


def scan_platforms(source_root: Path, database: Database, scanner: SymbolScanner,
                   config: Optional[ScanConfig] = None, workers: int = 1) -> List[str]:
    """Scan all platforms under ``source_root`` into ``database``.

    Every framework directory is resolved before scanning starts, so a
    layout problem on any platform aborts the run without doing work.
    With ``workers > 1`` platforms are scanned concurrently.

    Returns:
        Platform labels in scan order
    """
    config = config or ScanConfig()
    entries = list(enumerate_platform_directories(source_root, config))
    if not entries:
        logger.warning("No platform directories found in %s", source_root)

    if workers <= 1 or len(entries) <= 1:
        for entry in entries:
            print(f"  {entry.platform}", file=sys.stderr)
            scan_platform(entry, database, scanner, config.binary_patterns)
        return [e.platform for e in entries]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(scan_platform, e, database, scanner, config.binary_patterns): e
            for e in entries
        }
        try:
            for future in as_completed(futures):
                future.result()
                print(f"  {futures[future].platform}", file=sys.stderr)
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    return [e.platform for e in entries]
