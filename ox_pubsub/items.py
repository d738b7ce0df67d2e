"""Item extraction from pubsub documents."""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import ValidationError

from ox_pubsub.exceptions import DocumentError
from ox_pubsub.models import DEFAULT_NODE, Item
from ox_pubsub.stanza import child_elements, first_child, iter_named
from ox_pubsub.uri import PubSubURI


logger = logging.getLogger(__name__)

ItemDecoder = Callable[[ET.Element], Item]


def publish_time(entry: ET.Element) -> Optional[datetime]:
    """Publish time from the entry's first child, if it carries one."""
    payload = first_child(entry)
    if payload is None:
        return None

    value = payload.get("publish-time")
    if not value:
        return None

    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Ignoring unparseable publish-time {value!r}")
        return None


def source_uri(document: ET.Element, base: PubSubURI) -> PubSubURI:
    """The sending service, falling back to the configured base address."""
    sender = document.get("from")
    if sender:
        return PubSubURI(path=sender)
    return base


class ItemExtractor:
    """Decodes every ``<item>`` entry in a document.

    Any ``items`` element anywhere in the document is treated as a container,
    not just the one at the canonical ``/iq/pubsub/items`` position. Only its
    direct ``item`` children are decoded.
    """

    def __init__(self, base: PubSubURI, decoder: ItemDecoder):
        self.base = base
        self.decoder = decoder

    def extract(self, document: ET.Element) -> List[Item]:
        source = source_uri(document, self.base)
        items: List[Item] = []

        for container in iter_named(document, "items"):
            node = container.get("node") or DEFAULT_NODE
            for entry in child_elements(container, "item"):
                item_id = entry.get("id")
                if item_id is None:
                    raise DocumentError(f"item entry on node {node!r} has no id")

                try:
                    item = self.decoder(entry)
                except ValidationError as e:
                    raise DocumentError(f"item {item_id!r} on node {node!r} does not decode: {e}") from e
                item.publish_time = publish_time(entry)
                item.uri = source.extend(node=node, item=item_id)
                items.append(item)

        logger.debug(f"Extracted {len(items)} items from {source}")
        return items
