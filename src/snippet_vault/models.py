from datetime import datetime
from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, Field

from .storage import SnippetRecord

Complexity: TypeAlias = Literal["simple", "moderate", "complex"]

Tag = Annotated[str, Field(min_length=1, max_length=32, pattern=r"^[\w-]+$")]


class SnippetCreate(BaseModel):
    """Payload for creating a snippet"""

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    # Empty code is allowed; such snippets are never embedded.
    code: str = Field(default="", max_length=50000)
    language: str = Field(min_length=1, max_length=50)
    tags: list[Tag] = Field(default_factory=list, max_length=20)
    framework: str | None = Field(default=None, max_length=100)
    complexity: Complexity | None = None
    is_public: bool = False
    is_favorite: bool = False


class SnippetUpdate(BaseModel):
    """Partial update; only fields explicitly sent are applied"""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    code: str | None = Field(default=None, max_length=50000)
    language: str | None = Field(default=None, min_length=1, max_length=50)
    tags: list[Tag] | None = Field(default=None, max_length=20)
    framework: str | None = Field(default=None, max_length=100)
    complexity: Complexity | None = None
    is_public: bool | None = None
    is_favorite: bool | None = None

    def to_changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class SnippetOut(BaseModel):
    """Snippet as returned to its owner; the raw embedding is never exposed"""

    id: str
    user_id: str
    title: str
    description: str | None
    code: str
    language: str
    tags: list[str]
    framework: str | None
    complexity: str | None
    is_public: bool
    is_favorite: bool
    usage_count: int
    has_embedding: bool
    last_used_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_record(cls, record: SnippetRecord) -> "SnippetOut":
        return cls(
            id=record.id,
            user_id=record.user_id,
            title=record.title,
            description=record.description,
            code=record.code,
            language=record.language,
            tags=list(record.tags),
            framework=record.framework,
            complexity=record.complexity,
            is_public=record.is_public,
            is_favorite=record.is_favorite,
            usage_count=record.usage_count,
            has_embedding=record.has_embedding,
            last_used_at=record.last_used_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class CodeAnalysis(BaseModel):
    """Structured analysis of a code snippet"""

    tags: list[str] = Field(default_factory=list, description="Short topical tags")
    description: str = Field(description="Brief description of what the code does")
    framework: str | None = Field(
        default=None, description="Framework name if applicable, or null"
    )
    complexity: Complexity = Field(description="simple, moderate or complex")


class CodeRequest(BaseModel):
    """Code plus its language, as sent to the AI helpers"""

    code: str = Field(min_length=1)
    language: str = Field(min_length=1, max_length=50)


class EmbedRequest(BaseModel):
    text: str = Field(min_length=1)
