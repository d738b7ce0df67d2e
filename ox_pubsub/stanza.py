"""Element helpers shared by the request builder and the document readers.

Matching is by local name and ignores namespaces.
"""

import xml.etree.ElementTree as ET
from typing import Iterator, List, Optional


NS_PUBSUB = "http://jabber.org/protocol/pubsub"
NS_XDATA = "jabber:x:data"


def local_name(element: ET.Element) -> str:
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def qualified(namespace: str, name: str) -> str:
    return f"{{{namespace}}}{name}"


def child_elements(element: ET.Element, name: Optional[str] = None) -> List[ET.Element]:
    """Direct element children, optionally filtered by local name."""
    return [
        child for child in element
        if name is None or local_name(child) == name
    ]


def first_child(element: Optional[ET.Element]) -> Optional[ET.Element]:
    if element is None:
        return None
    for child in element:
        return child
    return None


def iter_named(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Every element named *name* in document order, *element* included."""
    for candidate in element.iter():
        if local_name(candidate) == name:
            yield candidate


def find_named(element: ET.Element, name: str) -> Optional[ET.Element]:
    for candidate in iter_named(element, name):
        return candidate
    return None


def text_of(element: Optional[ET.Element]) -> str:
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def tostring(element: ET.Element) -> str:
    return ET.tostring(element, encoding="unicode")
