"""Transport contract the pubsub engine is driven by.

Connection lifecycle, authentication and framing live behind this interface.
"""

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


CompletionHandler = Callable[[Optional[ET.Element], Any], None]
ListenerHandler = Callable[[ET.Element], None]


class Transport(ABC):
    """Minimal contract for an XMPP connection."""

    @abstractmethod
    def send(
        self,
        request: ET.Element,
        on_complete: CompletionHandler,
        context: Any = None
    ) -> None:
        """Dispatch one request.

        *on_complete* is invoked exactly once as ``on_complete(response,
        context)``; *response* is ``None`` when delivery failed.
        """

    @abstractmethod
    def register_permanent_listener(self, address: str, handler: ListenerHandler) -> None:
        """Deliver every push document addressed from *address* to *handler*."""

    @abstractmethod
    def local_identity(self) -> str:
        """The connection's own JID."""
