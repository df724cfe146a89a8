from __future__ import annotations

from typing import Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Response

from svue_api.core.auth import get_auth_token
from svue_api.core.errors import EmptyCredentialsError
from svue_api.schemas.auth import AuthToken
from svue_api.schemas.gradebook import GradebookResponse
from svue_api.schemas.student import Document, SchoolInfo, StudentInfo
from svue_api.services.studentvue_service import StudentVueService, get_studentvue_service
from svue_api.utils.token_crypto import encode_token

router = APIRouter(tags=["studentvue"])

SET_TOKEN_HEADER = "Set-Token"

T = TypeVar("T")


async def with_token(
    token: AuthToken,
    fetch: Callable[[AuthToken], Awaitable[T]],
) -> Tuple[T, Dict[str, str]]:
    """
    Run ``fetch`` and return its data plus the headers to send back.

    If StudentVue issued a new session cookie along the way, the updated token
    is re-encrypted and returned as Set-Token.
    """
    if token.is_empty():
        raise EmptyCredentialsError()

    before = token.model_copy()
    data = await fetch(token)

    headers: Dict[str, str] = {}
    if token != before:
        headers[SET_TOKEN_HEADER] = encode_token(token)
    return data, headers


def content_disposition(kind: str, file_name: str) -> str:
    safe = file_name.replace('"', "'").replace("\r", "").replace("\n", "")
    try:
        safe.encode("latin-1")
    except UnicodeEncodeError:
        ascii_name = safe.encode("ascii", "replace").decode("ascii")
        return f"{kind}; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(safe)}"
    return f'{kind}; filename="{safe}"'


@router.get("/grades", response_model=GradebookResponse)
async def grades(
    response: Response,
    report_period: Optional[int] = Query(default=None),
    token: AuthToken = Depends(get_auth_token),
    service: StudentVueService = Depends(get_studentvue_service),
):
    data, headers = await with_token(token, lambda t: service.grades(t, report_period))
    response.headers.update(headers)
    return data


@router.get("/documents", response_model=List[Document])
async def documents(
    response: Response,
    token: AuthToken = Depends(get_auth_token),
    service: StudentVueService = Depends(get_studentvue_service),
):
    data, headers = await with_token(token, service.documents)
    response.headers.update(headers)
    return data


@router.get("/document")
async def document(
    gu: str = Query(..., min_length=1),
    token: AuthToken = Depends(get_auth_token),
    service: StudentVueService = Depends(get_studentvue_service),
):
    doc, headers = await with_token(token, lambda t: service.document(t, gu))

    if doc.file_name.lower().endswith(".pdf"):
        media_type = "application/pdf"
        headers["Content-Disposition"] = content_disposition("inline", doc.file_name)
    else:
        media_type = "application/octet-stream"
        headers["Content-Disposition"] = content_disposition("attachment", doc.file_name)

    return Response(content=doc.file_data, media_type=media_type, headers=headers)


@router.get("/student", response_model=StudentInfo)
async def student_info(
    response: Response,
    token: AuthToken = Depends(get_auth_token),
    service: StudentVueService = Depends(get_studentvue_service),
):
    data, headers = await with_token(token, service.student_info)
    response.headers.update(headers)
    return data


@router.get("/photo")
async def student_photo(
    token: AuthToken = Depends(get_auth_token),
    service: StudentVueService = Depends(get_studentvue_service),
):
    photo, headers = await with_token(token, service.photo)
    headers["Content-Disposition"] = 'attachment; filename="image.png"'
    return Response(content=photo, media_type="image/png", headers=headers)


@router.get("/school", response_model=SchoolInfo)
async def school_info(
    response: Response,
    token: AuthToken = Depends(get_auth_token),
    service: StudentVueService = Depends(get_studentvue_service),
):
    data, headers = await with_token(token, service.school_info)
    response.headers.update(headers)
    return data
