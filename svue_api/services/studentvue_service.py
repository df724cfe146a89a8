from __future__ import annotations

from typing import List, Optional
from xml.sax.saxutils import escape

from fastapi import Request

from svue_api.clients.studentvue_client import StudentVueClient
from svue_api.core.errors import ParsingError
from svue_api.parsers import (
    parse_document,
    parse_document_list,
    parse_gradebook,
    parse_school_info,
    parse_student_info,
)
from svue_api.schemas.auth import AuthToken
from svue_api.schemas.gradebook import GradebookResponse
from svue_api.schemas.student import Document, DocumentData, SchoolInfo, StudentInfo


class StudentVueService:
    """
    One method per proxied resource: call the web service, translate the result.

    Each call may update ``token.cookie``; the API layer decides whether to hand
    a refreshed token back to the caller.
    """

    def __init__(self, client: StudentVueClient) -> None:
        self.client = client

    async def grades(self, token: AuthToken, report_period: Optional[int] = None) -> GradebookResponse:
        params = f"<ReportPeriod>{report_period}</ReportPeriod>" if report_period is not None else ""
        result = await self.client.request("Gradebook", token, params)
        return parse_gradebook(result)

    async def documents(self, token: AuthToken) -> List[Document]:
        result = await self.client.request("GetStudentDocumentInitialData", token)
        return parse_document_list(result)

    async def document(self, token: AuthToken, gu: str) -> DocumentData:
        result = await self.client.request(
            "GetContentOfAttachedDoc", token, f"<DocumentGU>{escape(gu)}</DocumentGU>"
        )
        return parse_document(result)

    async def student_info(self, token: AuthToken) -> StudentInfo:
        result = await self.client.request("StudentInfo", token)
        info, _ = parse_student_info(result)
        return info

    async def photo(self, token: AuthToken) -> bytes:
        result = await self.client.request("StudentInfo", token)
        _, photo = parse_student_info(result)
        if not photo:
            raise ParsingError("missing field `Photo`")
        return photo

    async def school_info(self, token: AuthToken) -> SchoolInfo:
        result = await self.client.request("StudentSchoolInfo", token)
        return parse_school_info(result)


def get_studentvue_service(request: Request) -> StudentVueService:
    http_client = getattr(request.app.state, "http_client", None)
    return StudentVueService(client=StudentVueClient(http_client=http_client))
