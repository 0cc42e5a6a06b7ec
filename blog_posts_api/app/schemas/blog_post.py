"""
Pydantic schemas for blog posts.

A post is created from ``{title, content, author: {firstName,
lastName}}``.  The structured author is collapsed into a single
``author_name`` display string before it reaches the store, and posts
are returned as ``{id, title, content, author}`` where ``author`` is
that string.  First and last name cannot be recovered from a stored
post.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def join_author_name(first_name: str, last_name: str) -> str:
    """Return the display name stored for a post's author."""
    return first_name + " " + last_name


class AuthorIn(BaseModel):
    """Structured author accepted on input only."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)

    @property
    def full_name(self) -> str:
        return join_author_name(self.first_name, self.last_name)


class BlogPostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=1, description="Post title")
    content: str = Field(..., min_length=1, description="Post body")
    author: AuthorIn

    def to_record_fields(self) -> Dict[str, str]:
        """Map the wire input onto the fields the store persists."""
        return {
            "title": self.title,
            "content": self.content,
            "author_name": self.author.full_name,
        }


class BlogPostUpdate(BaseModel):
    """Schema for updating an existing post.

    All fields are optional; only provided values will be updated.  If
    ``id`` is present it must match the id in the request path.
    """

    id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    author: Optional[AuthorIn] = None

    def to_changes(self) -> Dict[str, str]:
        """Return only the supplied fields, keyed by their stored names."""
        changes: Dict[str, str] = {}
        if self.title is not None:
            changes["title"] = self.title
        if self.content is not None:
            changes["content"] = self.content
        if self.author is not None:
            changes["author_name"] = self.author.full_name
        return changes


class BlogPostRecord(BaseModel):
    """A post as kept by the store."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    author_name: str
    created_at: Optional[datetime] = None


class BlogPostRead(BaseModel):
    """Wire representation of a post."""

    id: str
    title: str
    content: str
    author: str

    @classmethod
    def from_record(cls, record: BlogPostRecord) -> "BlogPostRead":
        return cls(
            id=record.id,
            title=record.title,
            content=record.content,
            author=record.author_name,
        )
