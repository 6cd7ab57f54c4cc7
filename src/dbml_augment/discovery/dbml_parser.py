"""
DBML scanner for locating tables, fields and relationship statements.

Only enough structure is extracted to find table bodies, field names and
single-line `Ref:` statements. Table bodies are flat, so a small set of
regular expressions is enough; nothing here builds a full DBML syntax tree.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterator, Optional, Set

from dbml_augment.models import FieldEntry, ReferenceKey, TableDeclaration

logger = logging.getLogger(__name__)


class DbmlParser:
    """
    Scans DBML text produced by the schema extraction service.

    Supports:
    - `Table "<name>"` declarations (quoted names only)
    - Field lines of the form `<name> <type> ...`
    - Single-line `Ref: a.b > c.d` statements
    - Table level `Note: "..."` descriptions
    """

    # Characters the upstream encoding leaves behind and that break matching
    STRIP_CHARACTERS = "%"

    TABLE_NAME_PATTERN = re.compile(r'Table\s+"([^"]+)"')

    TABLE_BLOCK_PATTERN = re.compile(r'Table\s+"([^"]+)"\s*\{([^}]*)\}')

    REF_PATTERN = re.compile(
        r'Ref:\s*(\w+)\.(\w+)\s*>\s*(\w+)\.(\w+)',
        re.ASCII,
    )

    FIELD_PATTERN = re.compile(r'(\w+)\s+(\w+)', re.ASCII)

    TABLE_NOTE_PATTERN = re.compile(r'^\s*Note:\s*"([^"]+)"', re.MULTILINE)

    def sanitize(self, text: str) -> str:
        """Remove characters that corrupt later matching."""
        for char in self.STRIP_CHARACTERS:
            text = text.replace(char, "")
        return text

    def extract_table_names(self, text: str) -> Set[str]:
        """
        Build the table catalog.

        Membership is exact and case-sensitive; a name declared more than
        once appears once.
        """
        return set(self.TABLE_NAME_PATTERN.findall(text))

    def iter_tables(self, text: str) -> Iterator[TableDeclaration]:
        """Yield every `Table "<name>" { ... }` block in document order."""
        for match in self.TABLE_BLOCK_PATTERN.finditer(text):
            yield TableDeclaration(name=match.group(1), body=match.group(2))

    def extract_references(self, text: str) -> Set[ReferenceKey]:
        """
        Collect the single-line relationship statements already present.

        Statements in any other shape (multi-line, composite, other
        operators) are left in the document and are not tracked.
        """
        references: Set[ReferenceKey] = set()
        for line in text.split("\n"):
            match = self.REF_PATTERN.search(line)
            if match:
                references.add(ReferenceKey(*match.groups()))
        return references

    def parse_field(self, line: str) -> Optional[FieldEntry]:
        """Extract the field name and type token from one body line."""
        match = self.FIELD_PATTERN.search(line)
        if not match:
            return None
        return FieldEntry(name=match.group(1), type=match.group(2))

    def iter_fields(self, body: str, skip_notes: bool = False) -> Iterator[FieldEntry]:
        """
        Yield the fields of a table body.

        Args:
            body: Raw table body text
            skip_notes: Drop `Note ...` pseudo-fields (for listings only)
        """
        for line in body.split("\n"):
            if skip_notes and line.strip().lower().startswith("note"):
                continue
            entry = self.parse_field(line)
            if entry is not None:
                yield entry

    def extract_table_notes(self, text: str) -> Dict[str, str]:
        """Map table name -> its `Note: "..."` description, where present."""
        notes: Dict[str, str] = {}
        for table in self.iter_tables(text):
            match = self.TABLE_NOTE_PATTERN.search(table.body)
            if match:
                notes[table.name] = match.group(1)
        return notes
