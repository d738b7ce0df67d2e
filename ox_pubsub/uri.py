"""XMPP URIs naming pubsub services, nodes and items."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict


SCHEME = "xmpp:"


class PubSubURI(BaseModel):
    """Service address, optional node and optional item id.

    Rendered as ``xmpp:<path>?;node=<node>;item=<item>``. Values are frozen;
    :meth:`extend` returns a fresh URI.
    """
    model_config = ConfigDict(frozen=True)

    path: str
    node: Optional[str] = None
    item: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "PubSubURI":
        """Parse ``xmpp:path?;node=...;item=...``.

        A missing scheme is tolerated. An empty string yields an empty path,
        which callers treat as unusable.
        """
        text = (text or "").strip()
        if text.startswith(SCHEME):
            text = text[len(SCHEME):]
        path, _, query = text.partition("?")
        params = _parse_query(query)
        return cls(path=path, node=params.get("node"), item=params.get("item"))

    def extend(self, node: Optional[str] = None, item: Optional[str] = None) -> "PubSubURI":
        update = {}
        if node is not None:
            update["node"] = node
        if item is not None:
            update["item"] = item
        return self.model_copy(update=update)

    @property
    def base(self) -> "PubSubURI":
        return PubSubURI(path=self.path)

    def __str__(self) -> str:
        query = ""
        if self.node is not None:
            query += f";node={self.node}"
        if self.item is not None:
            query += f";item={self.item}"
        if query:
            return f"{SCHEME}{self.path}?{query}"
        return f"{SCHEME}{self.path}"


def _parse_query(query: str) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for part in query.split(";"):
        if not part:
            continue
        key, sep, value = part.partition("=")
        if sep:
            params[key] = value
    return params
