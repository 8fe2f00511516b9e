"""Documents written by the demo."""

from typing import List
from pydantic import Field, field_validator

from articles_demo.infrastructure.database import MongoDocument


class Article(MongoDocument):
    """A published article."""

    label: str
    slug: str
    description: str = ""
    text: str = ""
    tags: List[str] = Field(default_factory=list)

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        if not v or v != v.strip() or " " in v:
            raise ValueError("slug must be a non-empty string without spaces")
        return v
