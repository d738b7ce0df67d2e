"""Subscription options encoding.

Application options are submitted as a ``jabber:x:data`` form. Each option
becomes a ``pubsub#<name>`` field; fields with a registered transform are
converted to their wire representation first.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from ox_pubsub.exceptions import OptionError
from ox_pubsub.stanza import NS_PUBSUB, NS_XDATA, qualified


logger = logging.getLogger(__name__)

FORM_TYPE = "http://jabber.org/protocol/pubsub#subscribe_options"
DEFAULT_NAMESPACE = "pubsub#"


class _NotDecoded:
    """Returned by :meth:`OptionCodec.decode`; wire-to-application decoding
    has no defined format yet."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_DECODED"

    def __bool__(self) -> bool:
        return False


NOT_DECODED = _NotDecoded()


def format_expire(value: Any) -> str:
    """Format an absolute time as ``YYYY-MM-DDTHH:MM:SS.ssssZ`` in UTC.

    The fractional part carries four digits, so 6 ms renders as ``.0060``.
    """
    if not isinstance(value, datetime):
        raise OptionError(f"expire must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise OptionError("expire must be timezone-aware")

    utc = value.astimezone(timezone.utc)
    milliseconds = utc.microsecond // 1000
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}"
        f".{milliseconds * 10:04d}Z"
    )


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


TRANSFORMS: Dict[str, Callable[[Any], str]] = {
    "expire": format_expire,
}


class OptionCodec:
    """Converts option maps into subscribe-options forms."""

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        transforms: Optional[Dict[str, Callable[[Any], str]]] = None
    ):
        self.namespace = namespace
        self.transforms = dict(TRANSFORMS if transforms is None else transforms)

    def encode_field(self, name: str, value: Any) -> str:
        transform = self.transforms.get(name)
        if transform is not None:
            return transform(value)
        return _format_value(value)

    def fields(self, options: Mapping[str, Any]) -> Dict[str, str]:
        """Wire field names and values, FORM_TYPE first."""
        encoded = {"FORM_TYPE": FORM_TYPE}
        for name, value in options.items():
            encoded[f"{self.namespace}{name}"] = self.encode_field(name, value)
        return encoded

    def encode(self, options: Optional[Mapping[str, Any]]) -> ET.Element:
        """Build an ``<options>`` element wrapping a submit form."""
        opts = ET.Element(qualified(NS_PUBSUB, "options"))
        form = ET.SubElement(opts, qualified(NS_XDATA, "x"), {"type": "submit"})

        for var, value in self.fields(options or {}).items():
            field = ET.SubElement(form, qualified(NS_XDATA, "field"), {"var": var})
            ET.SubElement(field, qualified(NS_XDATA, "value")).text = value

        logger.debug(f"Encoded {len(options or {})} subscription options")
        return opts

    def decode(self, name: str, value: str) -> Any:
        """Wire-to-application decoding is not defined; always NOT_DECODED."""
        return NOT_DECODED
