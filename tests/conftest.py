"""Test configuration for the OX pubsub engine."""

import xml.etree.ElementTree as ET

import pytest

from ox_pubsub.config import PubSubConfig
from ox_pubsub.models import Item
from ox_pubsub.stanza import first_child
from ox_pubsub.subscribable import Subscribable
from ox_pubsub.transport import Transport


SERVICE = "pubsub.example.com"
LOCAL_JID = "alice@example.com/desk"


class FakeTransport(Transport):
    """Records requests and the permanent listener; replies on demand."""

    def __init__(self, jid=LOCAL_JID):
        self.jid = jid
        self.sent = []
        self.listeners = {}

    def send(self, request, on_complete, context=None):
        self.sent.append((request, on_complete, context))

    def register_permanent_listener(self, address, handler):
        self.listeners[address] = handler

    def local_identity(self):
        return self.jid

    @property
    def last_request(self):
        return self.sent[-1][0]

    def respond(self, response, index=-1):
        """Complete the request at *index* with *response* (XML text or None)."""
        _, on_complete, context = self.sent[index]
        if isinstance(response, str):
            response = ET.fromstring(response)
        on_complete(response, context)

    def push(self, document, address=SERVICE):
        if isinstance(document, str):
            document = ET.fromstring(document)
        self.listeners[address](document)


class SongItem(Item):
    title: str = ""


class SongService(Subscribable):
    def __init__(self, transport, config=None):
        super().__init__(transport, f"xmpp:{SERVICE}", config)

    def item_from_element(self, element):
        song = first_child(element)
        return SongItem(title=song.get("title", "") if song is not None else "")


class Recorder:
    """Callable that remembers every call's arguments."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)

    @property
    def count(self):
        return len(self.calls)


def result_iq(body="", sender=SERVICE):
    return f'<iq type="result" from="{sender}" id="r1">{body}</iq>'


def error_iq(condition, detail="", sender=SERVICE):
    return (
        f'<iq type="error" from="{sender}" id="e1">'
        f'<error type="modify">'
        f'<{condition} xmlns="urn:ietf:params:xml:ns:xmpp-stanzas">{detail}</{condition}>'
        f'</error></iq>'
    )


def redirect_iq(node, address=SERVICE, condition="redirect"):
    return error_iq(condition, f"xmpp:{address}?;node={node}")


@pytest.fixture
def test_config():
    """Test configuration."""
    return PubSubConfig(max_subscribe_attempts=5)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def service(transport, test_config):
    return SongService(transport, test_config)
