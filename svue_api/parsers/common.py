"""Small helpers shared by the StudentVue result parsers."""

from __future__ import annotations

import base64
import binascii
import math
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from svue_api.core.errors import ParsingError


def load_root(result: str, name: str) -> Tag:
    """Parse an inner result document and return its root element."""
    soup = BeautifulSoup(result or "", "xml")
    root = soup.find(name, recursive=False)
    if root is None:
        found = soup.find(True)
        got = found.name if found is not None else "nothing"
        raise ParsingError(f"expected root `{name}`, found {got}")
    return root


def child(tag: Tag, name: str) -> Tag:
    node = tag.find(name, recursive=False)
    if node is None:
        raise ParsingError(f"missing field `{name}`")
    return node


def children(tag: Tag, name: str) -> List[Tag]:
    return tag.find_all(name, recursive=False)


def attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if value is None:
        raise ParsingError(f"missing field `@{name}` on `{tag.name}`")
    return value


def attr_opt(tag: Tag, name: str, default: Optional[str] = None) -> Optional[str]:
    return tag.get(name, default)


def text(tag: Tag, name: str) -> str:
    return child(tag, name).get_text()


def decode_base64(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value)
    except (binascii.Error, ValueError) as exc:
        raise ParsingError(f"invalid base64 in `{field}`: {exc}")


def finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value
