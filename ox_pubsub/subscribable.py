"""Subscribable - the pubsub operations shared by every service module."""

import logging
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Union

from opentelemetry import trace
from prometheus_client import Counter
from pydantic import ValidationError

from ox_pubsub.callbacks import Callbacks, Completion
from ox_pubsub.config import PubSubConfig
from ox_pubsub.events import classify_subscription
from ox_pubsub.exceptions import DocumentError
from ox_pubsub.items import ItemExtractor
from ox_pubsub.models import DEFAULT_NODE, Item, Subscription
from ox_pubsub.options import OptionCodec
from ox_pubsub.requests import RequestBuilder
from ox_pubsub.responses import (
    RedirectContext,
    RedirectFollower,
    Retry,
    is_error,
    response_status,
)
from ox_pubsub.router import EventRouter, HandlerRegistry
from ox_pubsub.stanza import find_named, first_child, iter_named, local_name
from ox_pubsub.transport import Transport
from ox_pubsub.uri import PubSubURI


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

requests_sent = Counter(
    "ox_pubsub_requests_sent_total",
    "Pubsub requests handed to the transport",
    ["service", "operation"]
)
responses_received = Counter(
    "ox_pubsub_responses_total",
    "Pubsub responses by outcome",
    ["service", "operation", "status"]
)
redirects_followed = Counter(
    "ox_pubsub_redirects_followed_total",
    "Subscribe requests reissued after a redirect or gone error",
    ["service"]
)

CallbacksLike = Union[Callbacks, Mapping, None]


@dataclass(frozen=True)
class _SubscribeCall:
    context: RedirectContext
    options: Optional[Mapping[str, Any]]
    completion: Completion


@dataclass(frozen=True)
class _NodeCall:
    node: Optional[str]
    completion: Completion
    strict: bool = False


class Subscribable(ABC):
    """Subscribe to, query and configure nodes of one pubsub service.

    Subclasses supply the service address and :meth:`item_from_element`.
    Responses are delivered to :class:`~ox_pubsub.callbacks.Callbacks`;
    unsolicited events go to handlers registered with
    :meth:`register_handler`.
    """

    def __init__(
        self,
        transport: Transport,
        address: str,
        config: Optional[PubSubConfig] = None
    ):
        self.config = config or PubSubConfig()
        self.transport = transport
        self.pubsub_uri = PubSubURI.parse(address).base

        self.codec = OptionCodec(self.config.options_namespace)
        self.requests = RequestBuilder(self.pubsub_uri.path, self.codec)
        self.redirects = RedirectFollower(self.config.max_subscribe_attempts)
        self.extractor = ItemExtractor(self.pubsub_uri, self.item_from_element)

        # The registry has to exist before the listener can deliver anything.
        self.handlers = HandlerRegistry()
        self.router = EventRouter(self.pubsub_uri, self.extractor, self.handlers)
        self.router.bind(transport)

    @abstractmethod
    def item_from_element(self, element: ET.Element) -> Item:
        """Decode one ``<item>`` entry into this service's item type."""

    # Handler registry

    def register_handler(self, event: str, handler: Callable) -> None:
        """Install *handler* for *event*, replacing any previous one.

        *event* is one of ``on_pending``, ``on_subscribed``,
        ``on_unsubscribed``, ``on_publish`` or ``on_retract``.
        """
        self.handlers.register(event, handler)
        logger.debug(f"Registered {event} handler for {self.pubsub_uri}")

    def unregister_handler(self, event: str) -> None:
        """Remove the handler for *event*; later events of that kind are ignored."""
        self.handlers.unregister(event)
        logger.debug(f"Unregistered {event} handler for {self.pubsub_uri}")

    # Operations

    def subscribe(
        self,
        node: str,
        options: Union[Mapping[str, Any], CallbacksLike] = None,
        callbacks: CallbacksLike = None
    ) -> None:
        """Subscribe the local JID to *node*, following redirects.

        ``on_success(requested_uri, final_uri, response)`` or
        ``on_error(requested_uri, final_uri, response)``. ``subscribe(node,
        callbacks)`` is accepted as well.
        """
        if callbacks is None and Callbacks.looks_like(options):
            callbacks, options = options, None

        call = _SubscribeCall(
            context=RedirectContext.start(node),
            options=options,
            completion=Completion(Callbacks.coerce(callbacks), "subscribe"),
        )
        self._send_subscribe(call)

    def unsubscribe(self, node: str, callbacks: CallbacksLike = None) -> None:
        """``on_success(uri, response)`` or ``on_error(uri, response)``."""
        request = self.requests.unsubscribe(node, self.transport.local_identity())
        call = _NodeCall(node, Completion(Callbacks.coerce(callbacks), "unsubscribe"))
        self._send("unsubscribe", request, self._unsubscribe_handler, call)

    def get_items(self, node: str, callbacks: CallbacksLike = None) -> None:
        """``on_success(items)`` or ``on_error(response)``."""
        request = self.requests.get_items(node)
        call = _NodeCall(node, Completion(Callbacks.coerce(callbacks), "get_items"))
        self._send("get_items", request, self._get_items_handler, call)

    def get_subscriptions(
        self,
        node: Union[str, CallbacksLike] = None,
        callbacks: Union[CallbacksLike, bool] = None,
        strict_jid_match: Optional[bool] = None
    ) -> None:
        """List subscriptions, on *node* or on every node of the service.

        Accepts ``(callbacks)``, ``(callbacks, strict_jid_match)`` and
        ``(node, callbacks, strict_jid_match)``. A mapping in first position is
        always callbacks, even an empty one. With *strict_jid_match* only
        entries whose jid equals the local JID exactly are kept; a bare JID
        does not match a full one.

        ``on_success(requested_uri, final_uri, subscriptions, response)`` or
        ``on_error(requested_uri, final_uri, response)``.
        """
        if isinstance(node, (Callbacks, Mapping)):
            if strict_jid_match is None and isinstance(callbacks, bool):
                strict_jid_match = callbacks
            node, callbacks = None, node

        if strict_jid_match is None:
            strict_jid_match = self.config.strict_jid_match

        request = self.requests.get_subscriptions(node)
        call = _NodeCall(
            node,
            Completion(Callbacks.coerce(callbacks), "get_subscriptions"),
            strict=bool(strict_jid_match),
        )
        self._send("get_subscriptions", request, self._get_subscriptions_handler, call)

    def configure_node(
        self,
        subscription: Subscription,
        options: Optional[Mapping[str, Any]] = None,
        callbacks: CallbacksLike = None
    ) -> None:
        """Submit subscription options for an existing subscription.

        ``on_success(response)`` or ``on_error(response)``. Redirects are
        not followed here.
        """
        request = self.requests.configure_node(subscription, options)
        call = _NodeCall(
            subscription.node,
            Completion(Callbacks.coerce(callbacks), "configure_node"),
        )
        self._send("configure_node", request, self._configure_node_handler, call)

    # Plumbing

    def _node_uri(self, node: Optional[str]) -> PubSubURI:
        if node is None:
            return self.pubsub_uri
        return self.pubsub_uri.extend(node=node)

    def _send(
        self,
        operation: str,
        request: ET.Element,
        handler: Callable[[ET.Element, Any], None],
        call: Any
    ) -> None:
        def on_complete(response: Optional[ET.Element], context: Any) -> None:
            if response is None:
                logger.debug(f"No response to {operation} on {self.pubsub_uri}")
                responses_received.labels(
                    service=self.pubsub_uri.path,
                    operation=operation,
                    status="absent"
                ).inc()
                return

            responses_received.labels(
                service=self.pubsub_uri.path,
                operation=operation,
                status=response_status(response).value
            ).inc()
            handler(response, context)

        with tracer.start_as_current_span(
            f"pubsub.{operation}",
            attributes={
                "pubsub.service": self.pubsub_uri.path,
                "pubsub.request_id": request.get("id", ""),
            }
        ):
            requests_sent.labels(service=self.pubsub_uri.path, operation=operation).inc()
            self.transport.send(request, on_complete, call)

    def _send_subscribe(self, call: _SubscribeCall) -> None:
        request = self.requests.subscribe(
            call.context.current_node,
            self.transport.local_identity(),
            call.options,
        )
        self._send("subscribe", request, self._subscribe_handler, call)

    def _subscribe_handler(self, response: ET.Element, call: _SubscribeCall) -> None:
        context = call.context
        requested = self._node_uri(context.original_node)
        final = self._node_uri(context.current_node)

        if is_error(response):
            decision = self.redirects.decide(response, context)
            if isinstance(decision, Retry):
                logger.info(
                    f"Subscribe to {final} redirected to node "
                    f"{decision.context.current_node!r} (depth {decision.context.depth})"
                )
                redirects_followed.labels(service=self.pubsub_uri.path).inc()
                self._send_subscribe(
                    _SubscribeCall(decision.context, call.options, call.completion)
                )
                return

            call.completion.fail(requested, final, response)
            return

        call.completion.succeed(requested, final, response)

        subscription = first_child(find_named(response, "pubsub"))
        if subscription is not None and local_name(subscription) == "subscription":
            event = classify_subscription(subscription, final)
            if event is not None:
                self.router.dispatch(event)

    def _unsubscribe_handler(self, response: ET.Element, call: _NodeCall) -> None:
        uri = self._node_uri(call.node)
        if is_error(response):
            call.completion.fail(uri, response)
        else:
            call.completion.succeed(uri, response)

    def _get_items_handler(self, response: ET.Element, call: _NodeCall) -> None:
        if is_error(response):
            call.completion.fail(response)
        else:
            call.completion.succeed(self.extractor.extract(response))

    def _get_subscriptions_handler(self, response: ET.Element, call: _NodeCall) -> None:
        uri = self._node_uri(call.node)

        if is_error(response):
            call.completion.fail(uri, uri, response)
            return

        local_jid = self.transport.local_identity()
        subscriptions: List[Subscription] = []
        for element in iter_named(response, "subscription"):
            jid = element.get("jid")
            if call.strict and jid != local_jid:
                continue
            subscriptions.append(_subscription_from_element(element))

        call.completion.succeed(uri, uri, subscriptions, response)

    def _configure_node_handler(self, response: ET.Element, call: _NodeCall) -> None:
        if is_error(response):
            call.completion.fail(response)
        else:
            call.completion.succeed(response)


def _subscription_from_element(element: ET.Element) -> Subscription:
    try:
        return Subscription(
            node=element.get("node") or DEFAULT_NODE,
            jid=element.get("jid"),
            subscription=element.get("subscription"),
            subid=element.get("subid"),
        )
    except ValidationError as e:
        raise DocumentError(f"Invalid subscription entry: {e}") from e
