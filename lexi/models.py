"""
Pydantic models shared across the lexi core.
"""

from __future__ import annotations

from pydantic import BaseModel


class Language(BaseModel):
    """A language translations are stored for."""

    id: int
    name: str
    title: str = ""


class TopicRecord(BaseModel):
    """A single row of the topics table."""

    id: int
    identifier: str
    title: str = ""
    description: str = ""
