"""Routing of unsolicited pubsub events to per-entity handlers."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, fields
from typing import Callable, Optional

from opentelemetry import trace
from prometheus_client import Counter

from ox_pubsub.events import (
    Pending,
    Publish,
    PubSubEvent,
    Retract,
    Subscribed,
    Unsubscribed,
    classify,
)
from ox_pubsub.exceptions import DocumentError, UnknownEventError
from ox_pubsub.items import ItemExtractor
from ox_pubsub.transport import Transport
from ox_pubsub.uri import PubSubURI


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

events_dispatched = Counter(
    "ox_pubsub_events_dispatched_total",
    "Pubsub events delivered to a registered handler",
    ["service", "event"]
)
documents_dropped = Counter(
    "ox_pubsub_documents_dropped_total",
    "Push documents dropped without dispatch",
    ["service", "reason"]
)

ALIASES = {
    "onPending": "on_pending",
    "onSubscribed": "on_subscribed",
    "onUnsubscribed": "on_unsubscribed",
    "onPublish": "on_publish",
    "onRetract": "on_retract",
}


@dataclass
class HandlerRegistry:
    """One optional handler per event kind."""
    on_pending: Optional[Callable] = None
    on_subscribed: Optional[Callable] = None
    on_unsubscribed: Optional[Callable] = None
    on_publish: Optional[Callable] = None
    on_retract: Optional[Callable] = None

    @classmethod
    def names(cls) -> tuple:
        return tuple(f.name for f in fields(cls))

    def _resolve(self, event: str) -> str:
        name = ALIASES.get(event, event)
        if name not in self.names():
            raise UnknownEventError(event)
        return name

    def register(self, event: str, handler: Callable) -> None:
        setattr(self, self._resolve(event), handler)

    def unregister(self, event: str) -> None:
        setattr(self, self._resolve(event), None)

    def get(self, event: str) -> Optional[Callable]:
        return getattr(self, self._resolve(event))


class EventRouter:
    """Classifies push documents for one service and calls its handlers."""

    def __init__(self, base: PubSubURI, extractor: ItemExtractor, handlers: HandlerRegistry):
        self.base = base
        self.extractor = extractor
        self.handlers = handlers

    def bind(self, transport: Transport) -> None:
        transport.register_permanent_listener(self.base.path, self.handle)
        logger.info(f"Listening for pubsub events from {self.base.path}")

    def handle(self, document: ET.Element) -> None:
        with tracer.start_as_current_span(
            "pubsub.event",
            attributes={"pubsub.service": self.base.path}
        ) as span:
            try:
                event = classify(document, self.base, self.extractor)
            except DocumentError as e:
                span.record_exception(e)
                logger.error(f"Dropping malformed event from {self.base.path}: {e}")
                documents_dropped.labels(service=self.base.path, reason="malformed").inc()
                return

            if event is None:
                documents_dropped.labels(service=self.base.path, reason="unclassified").inc()
                return

            span.set_attribute("pubsub.event", type(event).__name__)
            self.dispatch(event)

    def _fire(self, name: str, *args) -> None:
        handler = self.handlers.get(name)
        if handler is None:
            return
        handler(*args)
        events_dispatched.labels(service=self.base.path, event=name).inc()

    def dispatch(self, event: PubSubEvent) -> None:
        if isinstance(event, Subscribed):
            self._fire("on_subscribed", event.uri)
        elif isinstance(event, Pending):
            self._fire("on_pending", event.uri)
        elif isinstance(event, Unsubscribed):
            self._fire("on_unsubscribed", event.uri)
        elif isinstance(event, Retract):
            self._fire("on_retract", event.uri)
        elif isinstance(event, Publish):
            for item in event.items:
                self._fire("on_publish", item)
        else:
            raise TypeError(f"Unhandled pubsub event {event!r}")
