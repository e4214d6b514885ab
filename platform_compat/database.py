"""In-memory compatibility database.

Maps each API member (keyed by doc-id) to the set of platforms on which the
observed behavior occurs, plus the ordered set of all known platforms.
"""

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Set, Tuple

from .symbol import SymbolIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatabaseEntry:
    """Per-symbol record of the platforms exhibiting the behavior.

    Only the owning Database changes the platform set; readers get a
    frozenset snapshot.
    """
    identity: SymbolIdentity
    _platforms: Set[str] = field(default_factory=set, repr=False)

    @property
    def platforms(self) -> FrozenSet[str]:
        return frozenset(self._platforms)

    @property
    def doc_id(self) -> str:
        return self.identity.doc_id

    @property
    def namespace_name(self) -> str:
        return self.identity.namespace_name

    @property
    def type_name(self) -> str:
        return self.identity.type_name

    @property
    def member_name(self) -> str:
        return self.identity.member_name


class Database:
    """Aggregate of per-platform observations.

    Invariants:
    - one entry per doc-id; an entry always holds at least one platform
    - ``platforms`` is the union of all entry platforms, in first-seen order
    - doc-ids present in ``exclusions`` never get an entry

    ``add`` is safe to call from several threads.
    """

    def __init__(self, exclusions: Optional["Database"] = None):
        """Create an empty database.

        Args:
            exclusions: Optional database used purely as a negative filter.
                Any doc-id it contains is dropped by ``add``.
        """
        self._entries: Dict[str, DatabaseEntry] = {}
        # dict keys double as an insertion-ordered set
        self._platforms: Dict[str, None] = {}
        self._exclusions = exclusions
        self._frozen = False
        self._lock = threading.Lock()

    @property
    def exclusions(self) -> Optional["Database"]:
        return self._exclusions

    @property
    def entries(self) -> Mapping[str, DatabaseEntry]:
        """Read-only doc-id -> entry view (no ordering guarantee)."""
        return MappingProxyType(self._entries)

    @property
    def platforms(self) -> Tuple[str, ...]:
        """Known platform names in insertion order (CSV column order)."""
        return tuple(self._platforms)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Database":
        """Make the database read-only; further ``add`` calls raise."""
        self._frozen = True
        return self

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._entries

    def get(self, doc_id: str) -> Optional[DatabaseEntry]:
        return self._entries.get(doc_id)

    def is_excluded(self, doc_id: str) -> bool:
        return self._exclusions is not None and doc_id in self._exclusions

    def add(self, doc_id: str, namespace_name: str, type_name: str,
            member_name: str, platform: str) -> None:
        """Record that ``doc_id`` exhibits the behavior on ``platform``.

        Creates the entry on first sight (its names are kept from that first
        call) or extends the platform set of an existing one. Adding the same
        platform twice is a no-op. Excluded doc-ids are silently dropped.

        Surrounding whitespace is stripped from ``doc_id``; it is the only
        normalization applied to the key.

        Raises:
            ValueError: If doc_id or platform is empty, or a value holds a
                line break (it could not be stored in one CSV row)
            RuntimeError: If the database is frozen
        """
        doc_id = (doc_id or "").strip()
        if not doc_id:
            raise ValueError("doc_id must not be empty")
        if not platform:
            raise ValueError(f"platform must not be empty (doc_id={doc_id})")
        for value in (doc_id, namespace_name, type_name, member_name, platform):
            if "\r" in value or "\n" in value:
                raise ValueError(f"Line break in value {value!r} (doc_id={doc_id!r})")
        if self._frozen:
            raise RuntimeError("Cannot add to a frozen database")

        if self.is_excluded(doc_id):
            logger.debug("Excluded %s on %s", doc_id, platform)
            return

        with self._lock:
            entry = self._entries.get(doc_id)
            if entry is None:
                identity = SymbolIdentity(doc_id, namespace_name, type_name, member_name)
                entry = DatabaseEntry(identity)
                self._entries[doc_id] = entry
            elif (entry.namespace_name, entry.type_name, entry.member_name) != (
                    namespace_name, type_name, member_name):
                logger.debug(
                    "Keeping names of %s: (%s, %s, %s) over (%s, %s, %s)",
                    doc_id, entry.namespace_name, entry.type_name, entry.member_name,
                    namespace_name, type_name, member_name,
                )

            entry._platforms.add(platform)
            self._platforms.setdefault(platform, None)

    def add_identity(self, identity: SymbolIdentity, platform: str) -> None:
        """``add`` taking a SymbolIdentity."""
        self.add(identity.doc_id, identity.namespace_name, identity.type_name,
                 identity.member_name, platform)

    def sorted_entries(self) -> List[DatabaseEntry]:
        """Entries ordered by (namespace, type, member, doc-id)."""
        return sorted(self._entries.values(), key=lambda e: e.identity.sort_key)

    def platform_map(self) -> Dict[str, FrozenSet[str]]:
        """doc-id -> frozenset of platforms, for comparing databases."""
        return {doc_id: e.platforms for doc_id, e in self._entries.items()}

    def __repr__(self) -> str:
        return (
            f"Database(entries={len(self._entries)}, "
            f"platforms={list(self._platforms)}, "
            f"exclusions={len(self._exclusions) if self._exclusions is not None else None})"
        )
