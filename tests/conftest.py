"""Shared fixtures: fake platform runtimes and an in-process scanner."""

import pytest
from pathlib import Path

from platform_compat.scanner import Observation, SymbolScanner
from platform_compat.symbol import SymbolIdentity

PNSE = "System.PlatformNotSupportedException"


class FakeScanner(SymbolScanner):
    """Scanner reading observations from the fake binaries themselves.

    Each fake binary is a text file with one doc-id per line.
    """

    def __init__(self):
        self.scanned = []

    def scan(self, binary: Path):
        self.scanned.append(binary)
        for line in binary.read_text().splitlines():
            if line.strip():
                yield Observation(SymbolIdentity.from_doc_id(line.strip()), PNSE)


@pytest.fixture
def fake_scanner():
    return FakeScanner()


@pytest.fixture
def make_runtime(tmp_path):
    """Create <root>/dotnet-dev-<platform>-x64.latest/shared/Microsoft.NETCore.App/<version>/."""
    root = tmp_path / 'runtimes'

    def _make(platform, binaries, version='2.0.0-preview3'):
        framework = (root / f'dotnet-dev-{platform}-x64.latest' / 'shared'
                     / 'Microsoft.NETCore.App' / version)
        framework.mkdir(parents=True, exist_ok=True)
        for name, doc_ids in binaries.items():
            (framework / name).write_text('\n'.join(doc_ids))
        return root

    return _make
