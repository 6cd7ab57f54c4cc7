"""
Relationship discovery for DBML schemas.

Infers missing foreign-key references from field naming conventions and
appends them to the document without duplicating declared ones.

Usage:
    from dbml_augment.discovery import augment_relationships

    dbml = augment_relationships(raw_dbml)
"""

from dbml_augment.discovery.dbml_parser import DbmlParser
from dbml_augment.discovery.relationship_inferrer import (
    RelationshipInferrer,
    TableResolver,
    augment_relationships,
)

__all__ = [
    "DbmlParser",
    "RelationshipInferrer",
    "TableResolver",
    "augment_relationships",
]
