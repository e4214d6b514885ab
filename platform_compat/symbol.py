"""Symbol identity for API members.

An API member is keyed by its documentation-comment id ("doc-id"), e.g.::

    M:System.IO.File.Open(System.String,System.IO.FileMode)
    T:System.Console
    P:System.Environment.ProcessorCount

The doc-id is stable across platforms, so observations made while scanning
different platform binaries merge into one entry.
"""

from dataclasses import dataclass
from typing import List, Tuple


# N: namespace, T: type, M: method, P: property, F: field, E: event
DOC_ID_KINDS = {"N", "T", "M", "P", "F", "E"}

_OPENERS = {"(": ")", "{": "}", "<": ">", "[": "]"}
_CLOSERS = {")", "}", ">", "]"}


def _strip_signature(name: str) -> str:
    """Drop the parameter list and conversion return type from a doc-id body."""
    for marker in ("(", "~"):
        idx = name.find(marker)
        if idx != -1:
            name = name[:idx]
    return name


def _split_name(name: str) -> List[str]:
    """Split a dotted name, ignoring dots nested inside brackets."""
    parts = []
    current = []
    depth = 0
    for char in name:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == "." and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


@dataclass(frozen=True)
class SymbolIdentity:
    """Canonical identity of an API member.

    ``doc_id`` is the primary key. The name fields are display values derived
    from it (or supplied by the scanner) and are not unique on their own:
    overloads share ``type_name`` and ``member_name`` but never ``doc_id``.
    """

    doc_id: str
    namespace_name: str = ""
    type_name: str = ""
    member_name: str = ""

    @classmethod
    def from_doc_id(cls, doc_id: str) -> "SymbolIdentity":
        """Derive namespace/type/member names from a doc-id.

        Examples:
            'T:System.Console'                    -> ('System', 'Console', '')
            'M:System.IO.File.Open(System.String)' -> ('System.IO', 'File', 'Open')
            'M:System.Text.StringBuilder.#ctor'    -> ('System.Text', 'StringBuilder', '#ctor')

        Raises:
            ValueError: If the doc-id is blank or lacks a ``<kind>:`` prefix
        """
        doc_id = (doc_id or "").strip()
        if not doc_id:
            raise ValueError("Empty doc-id")
        if len(doc_id) < 3 or doc_id[1] != ":" or doc_id[0] not in DOC_ID_KINDS:
            raise ValueError(
                f"Invalid doc-id '{doc_id}'. "
                f"Expected format: <kind>:<name> with kind in {''.join(sorted(DOC_ID_KINDS))}"
            )

        kind = doc_id[0]
        name = _strip_signature(doc_id[2:])
        parts = _split_name(name)

        if kind == "N":
            return cls(doc_id=doc_id, namespace_name=name)
        if kind == "T":
            return cls(
                doc_id=doc_id,
                namespace_name=".".join(parts[:-1]),
                type_name=parts[-1],
            )

        if len(parts) < 2:
            raise ValueError(f"Member doc-id '{doc_id}' has no declaring type")
        return cls(
            doc_id=doc_id,
            namespace_name=".".join(parts[:-2]),
            type_name=parts[-2],
            member_name=parts[-1],
        )

    @property
    def kind(self) -> str:
        """Single-letter doc-id kind ('T', 'M', ...), or '' if unprefixed."""
        if len(self.doc_id) > 1 and self.doc_id[1] == ":":
            return self.doc_id[0]
        return ""

    @property
    def sort_key(self) -> Tuple[str, str, str, str]:
        """Export order: namespace, type, member, then doc-id."""
        return (self.namespace_name, self.type_name, self.member_name, self.doc_id)

    def __str__(self) -> str:
        return self.doc_id
