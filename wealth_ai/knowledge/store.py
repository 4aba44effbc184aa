from __future__ import annotations

"""Keyword-overlap retrieval over the knowledge library and user documents."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from wealth_ai.knowledge.catalog import KNOWLEDGE_BASE
from wealth_ai.knowledge.types import KnowledgeItem, UserDocument

logger = logging.getLogger(__name__)


def split_terms(query: str) -> set[str]:
    """Lowercase a query and split it into non-empty whitespace-separated terms."""
    return {term for term in query.lower().split() if term}


def _matches_any(terms: set[str], searchable: str) -> bool:
    return any(term in searchable for term in terms)


@dataclass
class RetrievalStore:
    """In-memory store pairing the fixed knowledge library with session documents.

    Matching is a case-insensitive substring test: an entry is returned when any
    query term occurs anywhere in its searchable text. Results keep catalog or
    insertion order; there is no scoring.
    """
    catalog: tuple[KnowledgeItem, ...] = KNOWLEDGE_BASE
    documents: list[UserDocument] = field(default_factory=list)

    def add_documents(self, documents: Iterable[UserDocument]) -> int:
        """Append documents in order; ids are not deduplicated."""
        added = 0
        for document in documents:
            self.documents.append(document)
            added += 1
        logger.info(
            "documents_added",
            extra={"added": added, "document_count": len(self.documents)},
        )
        return added

    def remove_document(self, document_id: str) -> int:
        """Remove every document with the given id and return how many were dropped."""
        kept = [doc for doc in self.documents if doc.id != document_id]
        removed = len(self.documents) - len(kept)
        self.documents = kept
        return removed

    def search_knowledge(self, query: str) -> list[KnowledgeItem]:
        """Return catalog items whose title, content or keywords contain any query term."""
        terms = split_terms(query)
        if not terms:
            return []
        results = [
            item
            for item in self.catalog
            if _matches_any(
                terms,
                f"{item.title} {item.content} {' '.join(item.keywords)}".lower(),
            )
        ]
        logger.info(
            "knowledge_search_complete",
            extra={"results": len(results), "query_length": len(query)},
        )
        return results

    def get_knowledge_by_id(self, item_id: str) -> KnowledgeItem | None:
        return next((item for item in self.catalog if item.id == item_id), None)

    def get_all_knowledge(self) -> list[KnowledgeItem]:
        return list(self.catalog)

    def get_relevant_context(self, query: str, limit: int = 2) -> str:
        """Build grounding text from the first matching catalog items.

        Returns an empty string when nothing matches.
        """
        items = self.search_knowledge(query)
        if not items:
            return ""
        return "\n\n".join(f"{item.title}:\n{item.content}" for item in items[: max(limit, 1)])

    def search_user_documents(self, query: str) -> list[UserDocument]:
        """Return session documents whose name or content contain any query term."""
        terms = split_terms(query)
        if not terms:
            return []
        results = [
            doc
            for doc in self.documents
            if _matches_any(terms, f"{doc.name} {doc.content}".lower())
        ]
        logger.info(
            "document_search_complete",
            extra={"results": len(results), "query_length": len(query)},
        )
        return results

    def stats(self) -> dict[str, int]:
        """Return basic counts for the store."""
        return {
            "knowledge_count": len(self.catalog),
            "document_count": len(self.documents),
        }
