"""Symbol scanner interface.

Binary introspection is done by an external tool; this module defines what
the rest of the pipeline expects from it and wraps command-line scanners.
"""

import json
import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Sequence

from .symbol import SymbolIdentity

logger = logging.getLogger(__name__)


class Observation(NamedTuple):
    """One scanner finding: ``identity`` exhibits ``detail`` (e.g. an exception type)."""
    identity: SymbolIdentity
    detail: str = ""


class SymbolScanner(ABC):
    """Abstract base class for symbol scanners."""

    @abstractmethod
    def scan(self, binary: Path) -> Iterator[Observation]:
        """Yield observations for one binary.

        The result is consumed exactly once; implementations may stream it.
        """
        pass


def parse_observation(line: str) -> Observation:
    """Parse one JSON-lines record from a scanner.

    Expected keys: ``docId`` (required), ``namespace``, ``type``, ``member``,
    ``exception``. Missing name fields are derived from the doc-id.

    Raises:
        ValueError: If the line is not a JSON object with a docId
    """
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid scanner output line: {line!r}") from e
    if not isinstance(record, dict):
        raise ValueError(f"Scanner record without docId: {line!r}")
    doc_id = record.get("docId")
    if not isinstance(doc_id, str) or not doc_id.strip():
        raise ValueError(f"Scanner record without docId: {line!r}")
    doc_id = doc_id.strip()

    names = (record.get("namespace"), record.get("type"), record.get("member"))
    if any(n is not None and not isinstance(n, str) for n in names):
        raise ValueError(f"Scanner record with non-string names: {line!r}")
    if any(n is None for n in names):
        identity = SymbolIdentity.from_doc_id(doc_id)
    else:
        identity = SymbolIdentity(doc_id, *names)
    return Observation(identity, record.get("exception") or "")


class CommandScanner(SymbolScanner):
    """Run an external scanning tool once per binary.

    The tool is invoked as ``<executable> <args...> <binary>`` and must print
    one JSON object per observation on stdout.
    """

    def __init__(self, executable: str = "ex-scan", args: Optional[Sequence[str]] = None,
                 timeout: Optional[float] = None):
        self.executable = executable
        self.args: List[str] = list(args or [])
        self.timeout = timeout

    def _resolve_executable(self) -> str:
        resolved = shutil.which(self.executable)
        if not resolved:
            raise RuntimeError(f"{self.executable} not found in PATH")
        return resolved

    def scan(self, binary: Path) -> Iterator[Observation]:
        cmd = [self._resolve_executable(), *self.args, str(binary)]
        logger.debug("Scanning %s", binary)
        try:
            r = subprocess.run(cmd, capture_output=True, text=True,
                               timeout=self.timeout, check=False)
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(f"{self.executable} timed out scanning {binary}") from e

        if r.returncode != 0:
            stderr_tail = r.stderr.strip()[-300:] if r.stderr.strip() else "(no output)"
            raise RuntimeError(
                f"{self.executable} failed on {binary.name} (rc={r.returncode}): {stderr_tail}"
            )

        for line in r.stdout.splitlines():
            if line.strip():
                yield parse_observation(line)
