"""Utility functions for safe, selective archive extraction."""

from pathlib import Path
import tarfile
import zipfile
from typing import Optional, Sequence


def _selected(name: str, prefixes: Optional[Sequence[str]]) -> bool:
    return prefixes is None or any(name.startswith(p) for p in prefixes)


def _check_inside(extract_dir: Path, name: str) -> Path:
    member_path = (extract_dir / name).resolve()
    if member_path != extract_dir and extract_dir not in member_path.parents:
        raise RuntimeError(
            f"Path traversal attempt detected: {name} "
            f"would extract outside {extract_dir}"
        )
    return member_path


def safe_extract_tar(tar: tarfile.TarFile, extract_dir: Path,
                     prefixes: Optional[Sequence[str]] = None) -> int:
    """Safely extract tar members preventing path traversal (CVE-2007-4559).

    Args:
        tar: tarfile.TarFile object
        extract_dir: Destination directory
        prefixes: Only members whose name starts with one of these are
            extracted (all members if None)

    Returns:
        Number of selected members

    Raises:
        RuntimeError: If a selected member attempts path traversal or is unsafe
    """
    extract_dir = extract_dir.resolve()
    selected = 0

    for member in tar.getmembers():
        if not _selected(member.name, prefixes):
            continue
        selected += 1

        _check_inside(extract_dir, member.name)

        # Reject symlinks, hard links, device files
        if member.issym() or member.islnk():
            raise RuntimeError(
                f"Unsafe tar member (symlink/hardlink): {member.name}"
            )
        if member.isdev() or member.ischr() or member.isblk():
            raise RuntimeError(
                f"Unsafe tar member (device file): {member.name}"
            )

        if member.isfile() or member.isdir():
            tar.extract(member, extract_dir)

    return selected


def safe_extract_zip(zf: zipfile.ZipFile, extract_dir: Path,
                     prefixes: Optional[Sequence[str]] = None) -> int:
    """Safely extract zip members preventing path traversal.

    Args:
        zf: zipfile.ZipFile object
        extract_dir: Destination directory
        prefixes: Only names starting with one of these are extracted

    Returns:
        Number of selected members

    Raises:
        RuntimeError: If a selected member attempts path traversal
    """
    extract_dir = extract_dir.resolve()
    selected = 0

    for name in zf.namelist():
        if not _selected(name, prefixes):
            continue
        selected += 1

        member_path = _check_inside(extract_dir, name)

        if name.endswith('/'):
            member_path.mkdir(parents=True, exist_ok=True)
        else:
            member_path.parent.mkdir(parents=True, exist_ok=True)
            member_path.write_bytes(zf.read(name))

    return selected
