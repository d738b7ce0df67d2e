"""Classification of inbound pubsub documents into typed events."""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ox_pubsub.exceptions import DocumentError
from ox_pubsub.items import ItemExtractor, source_uri
from ox_pubsub.models import DEFAULT_NODE, Item, SubscriptionState
from ox_pubsub.stanza import find_named, first_child, local_name
from ox_pubsub.uri import PubSubURI


@dataclass(frozen=True)
class Subscribed:
    uri: PubSubURI


@dataclass(frozen=True)
class Pending:
    uri: PubSubURI


@dataclass(frozen=True)
class Unsubscribed:
    uri: PubSubURI


@dataclass(frozen=True)
class Publish:
    items: Tuple[Item, ...]


@dataclass(frozen=True)
class Retract:
    uri: PubSubURI


PubSubEvent = Union[Subscribed, Pending, Unsubscribed, Publish, Retract]

_SUBSCRIPTION_EVENTS = {
    SubscriptionState.SUBSCRIBED.value: Subscribed,
    SubscriptionState.PENDING.value: Pending,
    SubscriptionState.NONE.value: Unsubscribed,
}


def classify_subscription(
    element: ET.Element,
    uri: PubSubURI
) -> Optional[PubSubEvent]:
    """Map a ``<subscription>`` element's state onto an event for *uri*."""
    event_type = _SUBSCRIPTION_EVENTS.get(element.get("subscription"))
    if event_type is None:
        return None
    return event_type(uri)


def classify_element(
    element: Optional[ET.Element],
    document: ET.Element,
    base: PubSubURI,
    extractor: ItemExtractor
) -> Optional[PubSubEvent]:
    """Classify the first child of an event envelope."""
    if element is None:
        return None

    source = source_uri(document, base)
    name = local_name(element)

    if name == "subscription":
        node = element.get("node") or DEFAULT_NODE
        return classify_subscription(element, source.extend(node=node))

    if name == "items":
        marker = first_child(element)
        if marker is not None and local_name(marker) == "retract":
            item_id = marker.get("id")
            if item_id is None:
                raise DocumentError("retract marker has no id")
            node = element.get("node") or DEFAULT_NODE
            return Retract(source.extend(node=node, item=item_id))
        return Publish(tuple(extractor.extract(document)))

    return None


def classify(
    document: ET.Element,
    base: PubSubURI,
    extractor: ItemExtractor
) -> Optional[PubSubEvent]:
    """Classify a push document; ``None`` when it is not a pubsub event."""
    envelope = find_named(document, "event")
    if envelope is None:
        return None
    return classify_element(first_child(envelope), document, base, extractor)
