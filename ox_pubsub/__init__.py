"""OX pubsub engine - subscriptions, item retrieval and event routing for XMPP pubsub services."""

from ox_pubsub.callbacks import Callbacks, Completion, Failure, Success
from ox_pubsub.config import PubSubConfig, ServiceConfig
from ox_pubsub.events import Pending, Publish, Retract, Subscribed, Unsubscribed, classify
from ox_pubsub.exceptions import (
    PubSubError,
    ConfigurationError,
    OptionError,
    DocumentError,
    UnknownEventError,
)
from ox_pubsub.models import Item, Subscription, SubscriptionState
from ox_pubsub.options import NOT_DECODED, OptionCodec
from ox_pubsub.services import (
    ActiveCalls,
    RecentCalls,
    UserAgents,
    Voicemail,
    build_services,
)
from ox_pubsub.subscribable import Subscribable
from ox_pubsub.transport import Transport
from ox_pubsub.uri import PubSubURI

__version__ = "0.1.0"

__all__ = [
    # Engine
    "Subscribable",
    "Transport",
    "Callbacks",
    "Completion",
    "Success",
    "Failure",
    # Models
    "Item",
    "Subscription",
    "SubscriptionState",
    "PubSubURI",
    # Events
    "Subscribed",
    "Pending",
    "Unsubscribed",
    "Publish",
    "Retract",
    "classify",
    # Options
    "OptionCodec",
    "NOT_DECODED",
    # Services
    "ActiveCalls",
    "UserAgents",
    "Voicemail",
    "RecentCalls",
    "build_services",
    # Config
    "PubSubConfig",
    "ServiceConfig",
    # Exceptions
    "PubSubError",
    "ConfigurationError",
    "OptionError",
    "DocumentError",
    "UnknownEventError",
]
