"""
Normalized Feed Interfaces
==========================

``FeedItem`` and ``Feed`` are the dialect-independent view over a decoded
document. Each dialect module supplies its own view classes with its own
fallback rules; nothing here carries state.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional


class FeedItem(ABC):
    """Common view over an Atom entry, RSS item or RDF item."""

    @property
    @abstractmethod
    def id(self) -> Optional[str]:
        ...

    @property
    @abstractmethod
    def title(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> Optional[str]:
        ...

    @property
    @abstractmethod
    def author(self) -> Optional[str]:
        ...

    @property
    @abstractmethod
    def published(self) -> Optional[datetime]:
        ...

    @property
    @abstractmethod
    def updated(self) -> Optional[datetime]:
        ...

    @property
    @abstractmethod
    def link(self) -> Optional[str]:
        ...

    @property
    def thread_link(self) -> Optional[str]:
        return None

    @property
    def thread_count(self) -> Optional[int]:
        return None

    @property
    def thread_updated(self) -> Optional[datetime]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary of the normalized fields, for display and logging."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "published": self.published,
            "updated": self.updated,
            "link": self.link,
            "thread_link": self.thread_link,
            "thread_count": self.thread_count,
            "thread_updated": self.thread_updated,
        }


class Feed(FeedItem):
    """Common view over a whole document."""

    @property
    @abstractmethod
    def document(self) -> Any:
        """The dialect model this view wraps."""

    @property
    @abstractmethod
    def mime_type(self) -> str:
        ...

    @property
    @abstractmethod
    def image_link(self) -> Optional[str]:
        ...

    @property
    @abstractmethod
    def copyright(self) -> Optional[str]:
        ...

    @property
    @abstractmethod
    def items(self) -> List[FeedItem]:
        ...

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "mime_type": self.mime_type,
                "image_link": self.image_link,
                "copyright": self.copyright,
                "item_count": len(self.items),
            }
        )
        return data
