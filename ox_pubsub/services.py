"""Service modules built on :class:`~ox_pubsub.subscribable.Subscribable`."""

import logging
import xml.etree.ElementTree as ET
from typing import ClassVar, Dict, List, Optional, Type

from ox_pubsub.config import PubSubConfig
from ox_pubsub.models import Item
from ox_pubsub.stanza import child_elements, first_child, local_name, text_of
from ox_pubsub.subscribable import Subscribable
from ox_pubsub.transport import Transport
from ox_pubsub.uri import PubSubURI


logger = logging.getLogger(__name__)


def payload_fields(entry: ET.Element) -> Dict[str, str]:
    """Child elements of the entry's payload, keyed by snake_case name.

    Names that collide with the engine's own :class:`Item` fields get a
    ``payload_`` prefix, so ``<uri>`` arrives as ``payload_uri``.
    """
    payload = first_child(entry)
    if payload is None:
        return {}

    fields = {}
    for child in payload:
        name = local_name(child).replace("-", "_")
        if name in Item.model_fields:
            name = f"payload_{name}"
        fields[name] = text_of(child)
    return fields


class ActiveCallItem(Item):
    dialog_state: Optional[str] = None
    call_id: Optional[str] = None
    from_uri: Optional[str] = None
    to_uri: Optional[str] = None
    uac_aor: Optional[str] = None
    uas_aor: Optional[str] = None
    from_tag: Optional[str] = None
    to_tag: Optional[str] = None


class UserAgentItem(Item):
    payload_uri: Optional[str] = None
    contact: Optional[str] = None
    received: Optional[str] = None
    device: Optional[str] = None
    expires: Optional[str] = None
    event: Optional[str] = None


class VoicemailItem(Item):
    mailbox: Optional[str] = None
    caller_id: Optional[str] = None
    created: Optional[str] = None
    duration: Optional[str] = None
    labels: List[str] = []


class RecentCallItem(Item):
    pass


class PubSubService(Subscribable):
    """A pubsub service whose address comes from configuration."""

    service_name: ClassVar[str] = ""
    item_class: ClassVar[Type[Item]] = Item
    command_uris: ClassVar[Dict[str, PubSubURI]] = {}

    def __init__(
        self,
        transport: Transport,
        config: Optional[PubSubConfig] = None,
        address: Optional[str] = None
    ):
        config = config or PubSubConfig()
        if address is None:
            address = config.get_service(self.service_name).address
        super().__init__(transport, address, config)

    def item_from_element(self, element: ET.Element) -> Item:
        return self.item_class(**payload_fields(element))


class ActiveCalls(PubSubService):
    service_name = "active_calls"
    item_class = ActiveCallItem
    command_uris = {
        "create": PubSubURI.parse("xmpp:commands.active-calls.xmpp.onsip.com?;node=create"),
        "transfer": PubSubURI.parse("xmpp:commands.active-calls.xmpp.onsip.com?;node=transfer"),
        "hangup": PubSubURI.parse("xmpp:commands.active-calls.xmpp.onsip.com?;node=terminate"),
    }


class UserAgents(PubSubService):
    service_name = "user_agents"
    item_class = UserAgentItem


class Voicemail(PubSubService):
    service_name = "voicemail"
    item_class = VoicemailItem

    def item_from_element(self, element: ET.Element) -> Item:
        fields = payload_fields(element)
        payload = first_child(element)
        labels = [] if payload is None else [
            text_of(label)
            for container in child_elements(payload, "labels")
            for label in child_elements(container, "label")
        ]
        fields["labels"] = labels
        return VoicemailItem(**fields)


class RecentCalls(PubSubService):
    service_name = "recent_calls"
    item_class = RecentCallItem
    command_uris = {
        "label": PubSubURI.parse("xmpp:commands.recent-calls.xmpp.onsip.com?;node=label"),
    }


SERVICE_CLASSES: Dict[str, Type[PubSubService]] = {
    cls.service_name: cls
    for cls in (ActiveCalls, UserAgents, Voicemail, RecentCalls)
}


def build_services(
    transport: Transport,
    config: Optional[PubSubConfig] = None
) -> Dict[str, PubSubService]:
    """Construct every enabled, known service from configuration."""
    config = config or PubSubConfig()
    services: Dict[str, PubSubService] = {}

    for name, service_config in config.services.items():
        if not service_config.enabled:
            continue
        service_class = SERVICE_CLASSES.get(name)
        if service_class is None:
            logger.warning(f"No service module for configured service {name!r}")
            continue
        services[name] = service_class(transport, config, service_config.address)

    return services
