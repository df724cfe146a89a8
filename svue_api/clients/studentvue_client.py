# svue_api/clients/studentvue_client.py
from __future__ import annotations

import logging
from typing import Any, Dict
from xml.sax.saxutils import escape

import httpx
from bs4 import BeautifulSoup

from svue_api.core.config import settings
from svue_api.core.errors import (
    AccessKeyError,
    MaintenanceError,
    NetworkError,
    ParsingError,
    StudentVueError,
    UnknownError,
)
from svue_api.schemas.auth import AuthToken

logger = logging.getLogger(__name__)

EDUPOINT_NS = "http://edupoint.com/webservices/"

_ENVELOPE = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<soap:Envelope xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xmlns:xsd="http://www.w3.org/2001/XMLSchema" '
    'xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
    "<soap:Body>"
    '<ProcessWebServiceRequest xmlns="{ns}">{fields}</ProcessWebServiceRequest>'
    "</soap:Body>"
    "</soap:Envelope>"
)


def build_envelope(method_name: str, token: AuthToken, params: str = "") -> str:
    """
    ProcessWebServiceRequest envelope for one PXPWebServices call.

    ``params`` is raw inner XML for <Parms>; it ends up escaped inside paramStr.
    """
    fields = []
    # StudentVue rejects empty userID/password elements outright
    if token.username:
        fields.append(("userID", token.username))
    if token.password:
        fields.append(("password", token.password))
    fields += [
        ("skipLoginLog", "1"),
        ("parent", "0"),
        ("webServiceHandleName", "PXPWebServices"),
        ("methodName", method_name),
        ("paramStr", f"<Parms><ChildIntID>0</ChildIntID>{params}</Parms>"),
    ]
    body = "".join(f"<{name}>{escape(value)}</{name}>" for name, value in fields)
    return _ENVELOPE.format(ns=EDUPOINT_NS, fields=body)


def collect_cookies(response: httpx.Response) -> str:
    # "ASP.NET_SessionId=abc; path=/; HttpOnly" -> "ASP.NET_SessionId=abc; "
    parts = []
    for raw in response.headers.get_list("set-cookie"):
        pieces = raw.split()
        if pieces:
            parts.append(pieces[0] + " ")
    return "".join(parts)


def extract_result(text: str) -> str:
    if not text or not text.strip():
        raise ParsingError("empty response body")

    soup = BeautifulSoup(text, "xml")
    if soup.find("Envelope") is None:
        raise ParsingError("missing field `Envelope`")

    node = soup.find("ProcessWebServiceRequestResult")
    if node is None:
        raise ParsingError("missing field `ProcessWebServiceRequestResult`")
    return node.get_text()


def raise_for_rt_error(result: str) -> None:
    if "ERROR_MESSAGE=" not in result:
        return

    node = BeautifulSoup(result, "xml").find("RT_ERROR")
    if node is None or node.get("ERROR_MESSAGE") is None:
        raise ParsingError("missing field `RT_ERROR`")

    message = node["ERROR_MESSAGE"]
    # server-side stack traces mention their assemblies; don't pass those on
    if ".dll" in message:
        raise UnknownError()
    raise StudentVueError(message)


class StudentVueClient:
    """
    SOAP access to a district's PXPCommunication service.

    - Every call runs in its own httpx.AsyncClient so the cookie jar never
      outlives one user's request; the session cookie lives in the AuthToken.
    - transport: only for tests (httpx.MockTransport).
    - http_client: shared client, used for the version key lookup only.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = http_client
        self._transport = transport
        self._service_path = settings.studentvue_service_path

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=settings.studentvue_connect_timeout,
            read=settings.studentvue_read_timeout,
            write=settings.studentvue_read_timeout,
            pool=settings.studentvue_connect_timeout,
        )

    def _client_kwargs(self) -> Dict[str, Any]:
        kw: Dict[str, Any] = {
            "timeout": self._timeout(),
            "follow_redirects": False,
            "headers": {"User-Agent": settings.studentvue_user_agent},
        }
        if self._transport is not None:
            kw["transport"] = self._transport
        return kw

    async def edu_version(self) -> str:
        if settings.version_number:
            return settings.version_number

        if not settings.access_key_url or self._http is None:
            raise AccessKeyError()

        try:
            resp = await self._http.get(settings.access_key_url)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("version key lookup failed: %s", exc)
            raise AccessKeyError()

        key = resp.text.strip()
        if not key:
            raise AccessKeyError()
        return key

    async def request(self, method_name: str, token: AuthToken, params: str = "") -> str:
        """
        Run one web service method and return the inner result document.

        Mutates ``token.cookie`` when StudentVue hands out a new session.
        """
        version = await self.edu_version()
        url = f"https://{token.district_url}{self._service_path}"
        headers = {
            "Cookie": (
                f"{token.cookie or ''}AppSupportsSession=1; "
                f"edupointkey=1; edupointkeyversion={version}"
            ),
            "Content-Type": "text/xml",
        }
        body = build_envelope(method_name, token, params)

        async with httpx.AsyncClient(**self._client_kwargs()) as client:
            try:
                resp = await client.post(url, content=body.encode("utf-8"), headers=headers)
            except httpx.RequestError as exc:
                logger.warning("StudentVue %s on %s unreachable: %s", method_name, token.district_url, type(exc).__name__)
                raise NetworkError()

        logger.debug("StudentVue %s on %s -> %s", method_name, token.district_url, resp.status_code)

        if resp.status_code == 405:
            raise MaintenanceError()

        cookies = collect_cookies(resp)
        if cookies:
            token.cookie = cookies

        result = extract_result(resp.text)
        raise_for_rt_error(result)
        return result
