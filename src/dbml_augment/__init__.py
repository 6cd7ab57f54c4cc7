"""
DBML Augment - Foreign-key relationship inference for DBML schemas

Takes the DBML produced by a schema extraction service and appends the
relationships its naming conventions imply.

Features:
- Lightweight scanner for tables, fields and `Ref:` statements
- Naming-convention resolution (`user_id` -> `user` / `users`, `creator_user_id` -> `user`)
- Strictly additive merge that never duplicates declared references
- JSON endpoint and CLI around the schema extraction API
- Optional dbdiagram.io embedding
"""

__version__ = "0.1.0"
__author__ = "DDG Team"

from dbml_augment.models import (
    AugmentResult,
    FieldEntry,
    GeneratedRelationship,
    ReferenceKey,
    ServiceConfig,
    TableDeclaration,
)

from dbml_augment.discovery import (
    DbmlParser,
    RelationshipInferrer,
    TableResolver,
    augment_relationships,
)

__all__ = [
    # Core models
    "AugmentResult",
    "FieldEntry",
    "GeneratedRelationship",
    "ReferenceKey",
    "ServiceConfig",
    "TableDeclaration",
    # Discovery
    "DbmlParser",
    "RelationshipInferrer",
    "TableResolver",
    "augment_relationships",
]
