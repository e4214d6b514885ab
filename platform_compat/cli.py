"""CLI interface for platform-compat."""

import argparse
import logging
import sys
import tempfile
from pathlib import Path
from typing import Optional

from . import __version__
from .config import ScanConfig
from .csv_codec import write_csv
from .database import Database
from .orchestrator import scan_platforms
from .overlay import create_database
from .scanner import CommandScanner, SymbolScanner
from .sources import create_source

logger = logging.getLogger(__name__)


def run(output: Path,
        inclusion_file: Optional[Path] = None,
        exclusion_file: Optional[Path] = None,
        source_path: Optional[Path] = None,
        config: Optional[ScanConfig] = None,
        scanner: Optional[SymbolScanner] = None,
        workers: int = 1) -> Database:
    """Build the compatibility database and write it to ``output``.

    Curated files are loaded before anything is downloaded so that a bad
    inclusion/exclusion file fails fast. The output file is only written
    once every platform has been scanned.
    """
    config = config or ScanConfig()
    if scanner is None:
        scanner = CommandScanner(config.scanner_command, config.scanner_args)

    database = create_database(inclusion_file, exclusion_file)
    source = create_source(source_path, config)

    with tempfile.TemporaryDirectory(prefix="platform_compat_") as tmpdir:
        root = source.prepare(Path(tmpdir))
        print("Analyzing...", file=sys.stderr)
        scan_platforms(root, database, scanner, config, workers=workers)

    write_csv(database, output)
    print(f"Wrote {len(database)} entries for {len(database.platforms)} platforms to {output}",
          file=sys.stderr)
    return database


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {n}")
    return n


def create_parser():
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="platform-compat",
        description="Build a cross-platform API compatibility table (CSV) from per-platform scans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Download the latest SDK drops and scan them
  platform-compat exceptions.csv

  # Scan already extracted runtimes, honoring curated data
  platform-compat --source ./runtimes --inclusions include.csv --exclusions exclude.csv out.csv

Exit codes:
  0  = Success
  1  = Error (nothing written)
"""
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("output", type=Path, help="Output CSV path")
    parser.add_argument("--inclusions", "--inc", type=Path, metavar="FILE",
                        help="CSV of known entries seeded before scanning")
    parser.add_argument("--exclusions", "--exc", type=Path, metavar="FILE",
                        help="CSV of doc-ids never to report")
    parser.add_argument("--source", "--src", type=Path, metavar="DIR",
                        help="Directory of extracted platform runtimes (skips download)")
    parser.add_argument("--config", type=Path, metavar="FILE",
                        help="YAML scan configuration (URLs, archive names, layout)")
    parser.add_argument("--scanner", metavar="CMD",
                        help="External scanner executable (overrides config)")
    parser.add_argument("--workers", type=_positive_int, default=1,
                        help="Platforms scanned in parallel (default: 1)")
    parser.add_argument("-v", "--verbose", action="store_true")

    return parser


def main(argv=None):
    """Entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ScanConfig.from_yaml(args.config) if args.config else ScanConfig()
        if args.scanner:
            config.scanner_command = args.scanner
        run(
            args.output.resolve(),
            inclusion_file=args.inclusions,
            exclusion_file=args.exclusions,
            source_path=args.source,
            config=config,
            workers=args.workers,
        )
    except Exception as e:
        if args.verbose:
            logger.exception("Run failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
