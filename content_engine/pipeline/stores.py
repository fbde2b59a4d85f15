"""Collaborator interfaces for the keyword runner

The pipeline only needs three contracts from the outside world:

- KeywordSource: queued keywords in, status transitions out
- ContentPublisher: creates the article in the headless content store
- ContentStore: one record per completed run, plus the published catalog

Database and CMS adapters implement these; the in-memory versions back
tests and local runs.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from uuid import uuid4

from ..models import CatalogEntry, ContentRecord, FinalArticle, Keyword, KeywordStatus


class KeywordSource(ABC):
    """Abstract base class for keyword queues"""

    @abstractmethod
    async def fetch_queued(self, limit: int) -> List[Keyword]:
        """
        Fetch queued keywords.

        Args:
            limit: Maximum number of keywords to return

        Returns:
            Keywords in queued state, highest priority first
        """
        pass

    @abstractmethod
    async def update_status(self, keyword_id: str, status: KeywordStatus) -> None:
        """
        Record a status transition.

        Args:
            keyword_id: Keyword identifier
            status: New status
        """
        pass


class ContentPublisher(ABC):
    """Abstract base class for headless content publishers"""

    @abstractmethod
    async def publish(self, article: FinalArticle, keyword: Keyword) -> str:
        """
        Create a document for a final article.

        Args:
            article: Final article
            keyword: Keyword the article was written for

        Returns:
            External document id
        """
        pass


class ContentStore(ABC):
    """Abstract base class for content record stores"""

    @abstractmethod
    async def create_record(self, record: ContentRecord) -> None:
        """
        Persist one record per completed run.

        Args:
            record: Record to store
        """
        pass

    @abstractmethod
    async def list_published(self) -> List[CatalogEntry]:
        """List existing content available for internal links"""
        pass


class InMemoryKeywordQueue(KeywordSource):
    """Keyword queue held in a dict"""

    def __init__(self, keywords: Optional[List[Keyword]] = None):
        self.keywords: Dict[str, Keyword] = {}
        self.statuses: Dict[str, KeywordStatus] = {}
        self.history: List[tuple] = []
        self._lock = asyncio.Lock()
        for keyword in keywords or []:
            self.add(keyword)

    def add(self, keyword: Keyword, status: KeywordStatus = KeywordStatus.QUEUED) -> None:
        self.keywords[keyword.id] = keyword
        self.statuses[keyword.id] = status

    async def fetch_queued(self, limit: int) -> List[Keyword]:
        async with self._lock:
            queued = [
                k for k in self.keywords.values()
                if self.statuses[k.id] == KeywordStatus.QUEUED
            ]
        queued.sort(key=lambda k: k.priority if k.priority is not None else float("-inf"), reverse=True)
        return queued[:limit]

    async def update_status(self, keyword_id: str, status: KeywordStatus) -> None:
        async with self._lock:
            if keyword_id not in self.keywords:
                raise KeyError(f"Unknown keyword id: {keyword_id}")
            self.statuses[keyword_id] = status
            self.history.append((keyword_id, status))


class InMemoryPublisher(ContentPublisher):
    """Publisher that keeps documents in a dict"""

    def __init__(self):
        self.documents: Dict[str, Dict[str, str]] = {}

    async def publish(self, article: FinalArticle, keyword: Keyword) -> str:
        document_id = str(uuid4())
        self.documents[document_id] = {
            "title": article.title,
            "slug": article.slug,
            "meta_description": article.meta_description,
            "body": article.body,
            "keyword": keyword.text,
        }
        return document_id


class InMemoryContentStore(ContentStore):
    """Content records held in a list"""

    def __init__(self, published: Optional[List[CatalogEntry]] = None):
        self.records: List[ContentRecord] = []
        self.published: List[CatalogEntry] = list(published or [])

    async def create_record(self, record: ContentRecord) -> None:
        self.records.append(record)
        self.published.append(CatalogEntry(title=record.title, slug=record.slug))

    async def list_published(self) -> List[CatalogEntry]:
        return list(self.published)
