"""Request documents for the five pubsub operations."""

import xml.etree.ElementTree as ET
from typing import Any, Mapping, Optional

import ulid

from ox_pubsub.models import Subscription
from ox_pubsub.options import OptionCodec
from ox_pubsub.stanza import NS_PUBSUB, qualified


def _set_attrs(element: ET.Element, **attrs: Optional[str]) -> ET.Element:
    for name, value in attrs.items():
        if value is not None:
            element.set(name, value)
    return element


def _child(parent: ET.Element, name: str) -> ET.Element:
    return ET.SubElement(parent, qualified(NS_PUBSUB, name))


class RequestBuilder:
    """Builds ``<iq>`` requests addressed to one pubsub service."""

    def __init__(self, address: str, codec: Optional[OptionCodec] = None):
        self.address = address
        self.codec = codec or OptionCodec()

    def _iq(self, kind: str) -> ET.Element:
        iq = ET.Element("iq", {
            "to": self.address,
            "type": kind,
            "id": str(ulid.new()),
        })
        return iq

    def _pubsub(self, iq: ET.Element) -> ET.Element:
        return _child(iq, "pubsub")

    def subscribe(
        self,
        node: str,
        jid: str,
        options: Optional[Mapping[str, Any]] = None
    ) -> ET.Element:
        iq = self._iq("set")
        pubsub = self._pubsub(iq)
        _set_attrs(_child(pubsub, "subscribe"), node=node, jid=jid)
        if options:
            pubsub.append(self.codec.encode(options))
        return iq

    def unsubscribe(self, node: str, jid: str) -> ET.Element:
        iq = self._iq("set")
        _set_attrs(_child(self._pubsub(iq), "unsubscribe"), node=node, jid=jid)
        return iq

    def get_items(self, node: str) -> ET.Element:
        iq = self._iq("get")
        _set_attrs(_child(self._pubsub(iq), "items"), node=node)
        return iq

    def get_subscriptions(self, node: Optional[str] = None) -> ET.Element:
        iq = self._iq("get")
        _set_attrs(_child(self._pubsub(iq), "subscriptions"), node=node)
        return iq

    def configure_node(
        self,
        subscription: Subscription,
        options: Optional[Mapping[str, Any]] = None
    ) -> ET.Element:
        iq = self._iq("set")
        opts = self.codec.encode(options or {})
        _set_attrs(
            opts,
            node=subscription.node,
            jid=subscription.jid,
            subid=subscription.subid,
        )
        self._pubsub(iq).append(opts)
        return iq
