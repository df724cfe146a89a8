from __future__ import annotations

import base64
import binascii
import ipaddress
import re
import time
from typing import Optional

from fastapi import Header

from svue_api.core.config import settings
from svue_api.core.errors import EmptyCredentialsError, ExpiredKeyError, InvalidCredentialsError
from svue_api.schemas.auth import AuthToken
from svue_api.utils.token_crypto import decode_token


# bare host name, no port, path or userinfo
_DISTRICT_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9.-]{0,251}[A-Za-z0-9])?$")


def now_millis() -> int:
    return int(time.time() * 1000)


def _district(value: Optional[str]) -> str:
    if not value:
        return settings.default_district_url
    value = value.strip().lower()
    if value.startswith("https://"):
        value = value[len("https://"):]
    value = value.rstrip("/")
    if not _DISTRICT_RE.match(value) or not _district_allowed(value):
        raise InvalidCredentialsError("Invalid district url")
    return value


def _district_allowed(host: str) -> bool:
    if host == settings.default_district_url.lower():
        return True
    if host == "localhost" or host.endswith(".localhost"):
        return False
    try:
        ipaddress.ip_address(host)
        return False
    except ValueError:
        pass
    return any(host.endswith(suffix) for suffix in settings.district_suffixes)


def token_from_basic(contents: str, district_url: Optional[str] = None) -> AuthToken:
    try:
        decoded = base64.b64decode(contents.strip(), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        raise InvalidCredentialsError()

    username, sep, password = decoded.partition(":")
    if not sep:
        raise InvalidCredentialsError()

    return AuthToken(
        username=username,
        password=password,
        cookie=None,
        expiry=now_millis() + settings.token_ttl_hours * 60 * 60 * 1000,
        district_url=_district(district_url),
    )


def token_from_bearer(contents: str) -> AuthToken:
    token = decode_token(contents)
    if now_millis() > token.expiry:
        raise ExpiredKeyError()
    return token


def parse_authorization(authorization: Optional[str], district_url: Optional[str] = None) -> AuthToken:
    if not authorization:
        raise EmptyCredentialsError()

    scheme, _, contents = authorization.partition(" ")
    if scheme == "Bearer":
        return token_from_bearer(contents)
    if scheme == "Basic":
        return token_from_basic(contents, district_url)

    raise InvalidCredentialsError()


async def get_auth_token(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    x_district_url: Optional[str] = Header(default=None, alias="X-District-Url"),
) -> AuthToken:
    return parse_authorization(authorization, x_district_url)
