"""Scan configuration.

Defaults target the .NET Core SDK nightly drops. A YAML file can override
any field::

    root_url: https://example.com/sdk/
    archives:
      - dotnet-dev-linux-x64.latest.tar.gz
    framework_version: "2.1.*"
"""

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Union

DEFAULT_ROOT_URL = "https://dotnetcli.blob.core.windows.net/dotnet/Sdk/master/"
DEFAULT_ARCHIVES = [
    "dotnet-dev-win-x64.latest.zip",
    "dotnet-dev-osx-x64.latest.tar.gz",
    "dotnet-dev-linux-x64.latest.tar.gz",
]


@dataclass
class ScanConfig:
    """Where to fetch platform runtimes and how to read their layout."""

    root_url: str = DEFAULT_ROOT_URL
    archives: List[str] = field(default_factory=lambda: list(DEFAULT_ARCHIVES))
    # group 1 is the platform label; unmatched directories use their path
    platform_pattern: str = r"dotnet-dev-([^-]+)-[^-]+.latest"
    framework_subpath: str = "shared/Microsoft.NETCore.App"
    framework_version: str = "2.0.0*"
    binary_patterns: List[str] = field(default_factory=lambda: ["*.dll"])
    scanner_command: str = "ex-scan"
    scanner_args: List[str] = field(default_factory=list)

    def __post_init__(self):
        try:
            re.compile(self.platform_pattern)
        except re.error as e:
            raise ValueError(f"Invalid platform_pattern '{self.platform_pattern}': {e}") from e
        if not self.framework_subpath:
            raise ValueError("framework_subpath must not be empty")
        if not self.binary_patterns:
            raise ValueError("binary_patterns must not be empty")

    @property
    def framework_prefixes(self) -> List[str]:
        """Archive entry prefixes selected during extraction."""
        prefix = self.framework_subpath.strip("/") + "/"
        return [prefix, "./" + prefix]

    @classmethod
    def from_dict(cls, data: dict) -> "ScanConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown config keys: {', '.join(unknown)}. "
                f"Supported keys: {', '.join(sorted(known))}"
            )
        for key in ("archives", "binary_patterns", "scanner_args"):
            if key in data and not isinstance(data[key], list):
                raise ValueError(f"Config key '{key}' must be a list")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ScanConfig":
        """Load overrides from a YAML mapping.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the document is not a mapping or has unknown keys
        """
        import yaml

        path = Path(path)
        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Config {path} must be a mapping, got {type(data).__name__}")
        return cls.from_dict(data)
