"""Column types shared by several models."""

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

json_type = JSON().with_variant(JSONB(), "postgresql")

__all__ = ["json_type"]
