"""
Request context handed to feed handlers.

A transport adapter (see ``feedforge.web``) builds a ``FeedContext`` from
its own request object, lets the handler fill the ``FeedResponse`` and then
converts the response back into its own type.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Union


@dataclass
class FeedResponse:
    """Buffered response written once by the handler pipeline."""

    status: int = 200
    content_type: Optional[str] = None
    charset: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytearray = field(default_factory=bytearray)
    write_count: int = 0

    def write(self, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode(self.charset or "utf-8")
        self.body.extend(data)
        self.write_count += 1

    def clear(self) -> None:
        """Drop headers and body; status goes back to 200."""
        self.status = 200
        self.content_type = None
        self.charset = None
        self.headers.clear()
        self.body.clear()
        self.write_count = 0

    @property
    def has_content(self) -> bool:
        return len(self.body) > 0


class FeedContext:
    """Transport-neutral request/response pair for one feed request."""

    def __init__(
        self,
        query: Optional[Mapping[str, str]] = None,
        url: Optional[str] = None,
        response: Optional[FeedResponse] = None,
        request_id: Optional[str] = None,
    ):
        self.query: Mapping[str, str] = dict(query or {})
        self.url = url
        self.response = response or FeedResponse()
        self.request_id = request_id
        self.completion_count = 0

    @property
    def is_complete(self) -> bool:
        return self.completion_count > 0

    def complete(self) -> None:
        """Signal that the response is final."""
        self.completion_count += 1
