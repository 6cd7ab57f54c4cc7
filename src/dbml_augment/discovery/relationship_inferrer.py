"""
Relationship Inferrer - Adds missing foreign-key references to DBML.

Runs a single forward pass over one document:
1. Sanitize the text
2. Build the table catalog
3. Collect the `Ref:` statements already declared
4. Scan every field of every table for `*_id` names
5. Resolve each candidate to an existing table by naming convention
6. Append a `Ref:` line for every resolved, not yet declared candidate
"""

from __future__ import annotations

import logging
import re
from typing import Callable, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

from dbml_augment.models import AugmentResult, GeneratedRelationship, ReferenceKey
from dbml_augment.discovery.dbml_parser import DbmlParser

logger = logging.getLogger(__name__)


def _rightmost_segment(base: str) -> Iterator[str]:
    # user_id -> user, users; creator_user_id -> user, users
    name = base.rsplit("_", 1)[-1]
    yield name
    yield name + "s"


def _widening_suffixes(base: str) -> Iterator[str]:
    # a_creator_user_id -> creator_user, creator_users, a_creator_user, a_creator_users
    parts = base.split("_")
    for i in range(len(parts) - 2, -1, -1):
        suffix = "_".join(parts[i:])
        yield suffix
        yield suffix + "s"


class TableResolver:
    """
    Maps a field name to the table it most likely references.

    Candidate names are produced lazily by an ordered table of generators and
    the first one present in the catalog wins. Each name is tried as-is,
    then with a trailing `s`:

    1. The last underscore-separated segment of the base (the field
       without `_id`); for a simple name this is the base itself
    2. Progressively longer suffixes of the base, ending with the full base

    So `session_id` resolves to `session`, else `sessions`, and
    `creator_user_id` resolves to `user` when that table exists and to
    `creator_user` only when it is the sole match.
    """

    FK_SUFFIX = "_id"
    PRIMARY_KEY = "id"

    CANDIDATE_GENERATORS: List[Tuple[str, Callable[[str], Iterable[str]]]] = [
        ("rightmost", _rightmost_segment),
        ("suffix", _widening_suffixes),
    ]

    def __init__(self, tables: Iterable[str]):
        self.tables: FrozenSet[str] = frozenset(tables)

    def is_candidate(self, field_name: str) -> bool:
        """A field is a foreign-key candidate if it ends in `_id` and is not `id`."""
        return field_name != self.PRIMARY_KEY and field_name.endswith(self.FK_SUFFIX)

    def candidates(self, field_name: str) -> Iterator[Tuple[str, str]]:
        """Yield (rule, table_name) guesses in precedence order."""
        if not self.is_candidate(field_name):
            return
        base = field_name[: -len(self.FK_SUFFIX)]
        for rule, generator in self.CANDIDATE_GENERATORS:
            for name in generator(base):
                yield rule, name

    def resolve(self, field_name: str) -> Optional[str]:
        """Return the referenced table name, or None if the field is not a foreign key."""
        for rule, name in self.candidates(field_name):
            if name in self.tables:
                logger.debug(f"Resolved {field_name} -> {name} ({rule})")
                return name
        return None


class RelationshipInferrer:
    """
    Infers relationships for one DBML document.

    Never raises on malformed input: anything that cannot be recognised simply
    yields no relationships. Existing statements are never removed or
    rewritten; generated ones are appended at the end.

    Deduplication assumes the referenced field is always `id`, which holds for
    the schemas produced upstream.
    """

    # Ref: statements only address tables by plain identifiers
    IDENTIFIER_PATTERN = re.compile(r"\w+", re.ASCII)

    def __init__(self, dbml: str, parser: Optional[DbmlParser] = None):
        """
        Initialize the inferrer.

        Args:
            dbml: Raw DBML text
            parser: Optional scanner (defaults to DbmlParser)
        """
        self.parser = parser or DbmlParser()
        self.dbml = self.parser.sanitize(dbml or "")
        self.tables: Set[str] = self.parser.extract_table_names(self.dbml)
        self.existing_references: FrozenSet[ReferenceKey] = frozenset(
            self.parser.extract_references(self.dbml)
        )
        self.resolver = TableResolver(self.tables)

    def scan_candidates(self) -> Iterator[GeneratedRelationship]:
        """Yield a relationship for every resolvable field, in table-then-field order."""
        for table in self.parser.iter_tables(self.dbml):
            if not self.IDENTIFIER_PATTERN.fullmatch(table.name):
                logger.debug(f"Skipping table with non-identifier name: {table.name!r}")
                continue
            for entry in self.parser.iter_fields(table.body):
                referenced = self.resolver.resolve(entry.name)
                if referenced:
                    yield GeneratedRelationship(
                        table=table.name,
                        field_name=entry.name,
                        referenced_table=referenced,
                    )

    def synthesize(self) -> List[GeneratedRelationship]:
        """Return the candidates not already declared in the document."""
        generated: List[GeneratedRelationship] = []
        emitted: Set[ReferenceKey] = set()

        for rel in self.scan_candidates():
            key = rel.key
            if key in self.existing_references or key in emitted:
                continue
            emitted.add(key)
            generated.append(rel)

        return generated

    def augment(self) -> AugmentResult:
        """
        Run the full pipeline.

        Returns:
            AugmentResult with the augmented DBML and what was generated
        """
        logger.debug(f"DBML length: {len(self.dbml)}")
        logger.debug(f"Contains existing Ref: {'Ref:' in self.dbml}")

        generated = self.synthesize()

        dbml = self.dbml
        if generated:
            dbml = dbml.rstrip() + "\n\n" + "\n".join(rel.to_dbml() for rel in generated)
            logger.info(f"Generated {len(generated)} relationship references")
            logger.debug(f"Generated refs: {[rel.to_dbml() for rel in generated[:5]]}")
        else:
            logger.info("No relationship references generated")

        logger.info(
            f"Scanned {len(self.tables)} tables "
            f"({len(self.existing_references)} existing references)"
        )

        return AugmentResult(
            dbml=dbml,
            tables=sorted(self.tables),
            existing_references=len(self.existing_references),
            generated=generated,
            table_notes=self.parser.extract_table_notes(self.dbml),
        )


def augment_relationships(raw_schema_text: str) -> str:
    """
    Convenience function: sanitize DBML and append inferred references.

    Args:
        raw_schema_text: DBML text as returned by the schema source

    Returns:
        The sanitized DBML with generated `Ref:` lines appended
    """
    return RelationshipInferrer(raw_schema_text).augment().dbml
