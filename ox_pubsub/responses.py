"""Response classification and the subscribe redirect state machine."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ox_pubsub.stanza import find_named, first_child, local_name, text_of
from ox_pubsub.uri import PubSubURI


logger = logging.getLogger(__name__)

REDIRECT_CONDITIONS = frozenset({"redirect", "gone"})
DEFAULT_MAX_ATTEMPTS = 5


class ResponseStatus(str, Enum):
    """How a response document resolves its request."""
    SUCCESS = "success"
    ERROR = "error"


def response_status(response: ET.Element) -> ResponseStatus:
    if response.get("type") == "error":
        return ResponseStatus.ERROR
    return ResponseStatus.SUCCESS


def is_error(response: ET.Element) -> bool:
    return response_status(response) is ResponseStatus.ERROR


def error_condition(response: ET.Element) -> Optional[ET.Element]:
    """The first child of the response's ``<error>`` element."""
    return first_child(find_named(response, "error"))


def redirect_target(response: ET.Element) -> Optional[PubSubURI]:
    """Replacement address carried by a redirect/gone error, if any."""
    condition = error_condition(response)
    if condition is None or local_name(condition) not in REDIRECT_CONDITIONS:
        return None
    return PubSubURI.parse(text_of(condition))


@dataclass(frozen=True)
class RedirectContext:
    """Where a subscribe call started, where it is now, and how many
    redirects it has followed."""
    original_node: str
    current_node: str
    depth: int = 0

    @classmethod
    def start(cls, node: str) -> "RedirectContext":
        return cls(original_node=node, current_node=node)

    def advance(self, node: str) -> "RedirectContext":
        return RedirectContext(self.original_node, node, self.depth + 1)


@dataclass(frozen=True)
class Retry:
    context: RedirectContext
    target: PubSubURI


@dataclass(frozen=True)
class Terminal:
    pass


Decision = Union[Retry, Terminal]


class RedirectFollower:
    """Decides whether a subscribe response is followed or delivered.

    At most ``max_attempts`` requests are issued per subscribe call, the
    first one included.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts

    def decide(self, response: ET.Element, context: RedirectContext) -> Decision:
        if not is_error(response):
            return Terminal()

        target = redirect_target(response)
        if target is None:
            return Terminal()

        if context.depth + 1 >= self.max_attempts:
            logger.warning(
                f"Redirect limit reached for node {context.original_node!r} "
                f"after {context.depth + 1} attempts"
            )
            return Terminal()

        if not target.path or not target.node:
            logger.warning(f"Ignoring redirect without a usable node: {target}")
            return Terminal()

        return Retry(context.advance(target.node), target)
