"""Composition of curated datasets with freshly scanned data.

- exclusions: doc-ids that must never appear, whatever a scan reports
- inclusions: known-true facts seeded before scanning; scans may add platforms

Both reduce to ``Database.add`` plus the database's exclusion filter.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .csv_codec import read_csv
from .database import Database

logger = logging.getLogger(__name__)


def load_exclusions(path: Union[str, Path]) -> Database:
    """Load an exclusion CSV into a standalone, frozen database."""
    exclusions = read_csv(path)
    logger.info("Loaded %d exclusions from %s", len(exclusions), path)
    return exclusions.freeze()


def create_database(inclusion_file: Optional[Union[str, Path]] = None,
                    exclusion_file: Optional[Union[str, Path]] = None,
                    exclusions: Optional[Database] = None) -> Database:
    """Create the working database for a run.

    Args:
        inclusion_file: CSV seeded into the database before any scanning
        exclusion_file: CSV of doc-ids to suppress
        exclusions: Already loaded exclusion database (overrides exclusion_file)

    Returns:
        Working database, filtered by the exclusions and seeded with inclusions
    """
    if exclusions is None and exclusion_file is not None:
        exclusions = load_exclusions(exclusion_file)

    database = Database(exclusions)

    if inclusion_file is not None:
        read_csv(inclusion_file, database)
        logger.info("Seeded %d entries from %s", len(database), inclusion_file)

    return database
