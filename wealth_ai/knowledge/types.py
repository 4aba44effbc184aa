from __future__ import annotations

"""Core data types for the knowledge base and user documents."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class KnowledgeItem:
    """Curated topic guide shipped with the service."""
    id: str
    title: str
    category: str
    content: str
    keywords: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class UserDocument:
    """Document supplied by the user for the current session."""
    id: str
    name: str
    type: str
    content: str
