"""Tests for request documents."""

from datetime import datetime, timezone

from ox_pubsub.models import Subscription
from ox_pubsub.requests import RequestBuilder
from ox_pubsub.stanza import NS_PUBSUB, NS_XDATA


def q(name, ns=NS_PUBSUB):
    return f"{{{ns}}}{name}"


class TestRequestBuilder:
    """Test RequestBuilder functionality."""

    def setup_method(self):
        self.builder = RequestBuilder("pubsub.example.com")

    def test_envelope(self):
        """Requests are addressed iqs with a ULID id."""
        iq = self.builder.get_items("songs")

        assert iq.tag == "iq"
        assert iq.get("to") == "pubsub.example.com"
        assert iq.get("type") == "get"
        assert len(iq.get("id")) == 26

    def test_ids_unique(self):
        """Every request gets its own id."""
        first = self.builder.get_items("songs")
        second = self.builder.get_items("songs")

        assert first.get("id") != second.get("id")

    def test_subscribe(self):
        """Subscribe carries node and jid, no options by default."""
        iq = self.builder.subscribe("songs", "alice@example.com/desk")

        assert iq.get("type") == "set"
        pubsub = iq.find(q("pubsub"))
        subscribe = pubsub.find(q("subscribe"))
        assert subscribe.get("node") == "songs"
        assert subscribe.get("jid") == "alice@example.com/desk"
        assert pubsub.find(q("options")) is None

    def test_subscribe_with_options(self):
        """Options are appended as a form."""
        expire = datetime(2024, 1, 2, 3, 4, 5, 6000, tzinfo=timezone.utc)
        iq = self.builder.subscribe("songs", "alice@example.com", {"expire": expire})

        opts = iq.find(q("pubsub")).find(q("options"))
        values = [v.text for v in opts.iter(q("value", NS_XDATA))]
        assert "2024-01-02T03:04:05.0060Z" in values

    def test_unsubscribe(self):
        """Unsubscribe carries node and jid."""
        iq = self.builder.unsubscribe("songs", "alice@example.com")

        unsubscribe = iq.find(q("pubsub")).find(q("unsubscribe"))
        assert iq.get("type") == "set"
        assert unsubscribe.attrib == {"node": "songs", "jid": "alice@example.com"}

    def test_get_items(self):
        """Items request names the node."""
        iq = self.builder.get_items("songs")

        assert iq.find(q("pubsub")).find(q("items")).get("node") == "songs"

    def test_get_subscriptions_all_nodes(self):
        """Without a node the attribute is omitted."""
        iq = self.builder.get_subscriptions()

        subscriptions = iq.find(q("pubsub")).find(q("subscriptions"))
        assert iq.get("type") == "get"
        assert "node" not in subscriptions.attrib

    def test_get_subscriptions_node(self):
        """A node narrows the query."""
        iq = self.builder.get_subscriptions("songs")

        assert iq.find(q("pubsub")).find(q("subscriptions")).get("node") == "songs"

    def test_configure_node(self):
        """Configuration embeds the subscription's identifiers."""
        subscription = Subscription(node="songs", jid="alice@example.com", subid="s-1")

        iq = self.builder.configure_node(subscription, {"digest": True})

        opts = iq.find(q("pubsub")).find(q("options"))
        assert iq.get("type") == "set"
        assert opts.get("node") == "songs"
        assert opts.get("jid") == "alice@example.com"
        assert opts.get("subid") == "s-1"
        assert opts.find(q("x", NS_XDATA)).get("type") == "submit"

    def test_configure_node_without_subid(self):
        """Absent subid is not rendered."""
        iq = self.builder.configure_node(Subscription(jid="alice@example.com"))

        opts = iq.find(q("pubsub")).find(q("options"))
        assert opts.get("node") == "/"
        assert "subid" not in opts.attrib
