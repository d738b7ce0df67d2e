"""Value models for the OX pubsub engine."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ox_pubsub.uri import PubSubURI


DEFAULT_NODE = "/"


class SubscriptionState(str, Enum):
    """Subscription states a pubsub service reports."""
    NONE = "none"
    PENDING = "pending"
    SUBSCRIBED = "subscribed"
    UNCONFIGURED = "unconfigured"


class Subscription(BaseModel):
    """One subscription entry reported by a pubsub service.

    ``jid`` and ``subid`` are opaque correlation tokens.
    """
    model_config = ConfigDict(frozen=True)

    node: str = DEFAULT_NODE
    jid: Optional[str] = None
    subscription: Optional[SubscriptionState] = None
    subid: Optional[str] = None


class Item(BaseModel):
    """Base class for decoded pubsub items.

    Service modules subclass this with their own payload fields. The engine
    fills in ``publish_time`` and ``uri`` after the service's decoder runs.
    """
    model_config = ConfigDict(extra="allow")

    publish_time: Optional[datetime] = Field(default=None)
    uri: Optional[PubSubURI] = Field(default=None)
