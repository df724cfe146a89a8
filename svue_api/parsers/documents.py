from __future__ import annotations

from typing import List

from svue_api.parsers.common import attr, child, children, decode_base64, load_root, text
from svue_api.schemas.student import Document, DocumentData


def parse_document_list(result: str) -> List[Document]:
    root = load_root(result, "StudentDocuments")
    return [
        Document(
            name=attr(d, "DocumentComment"),
            file_name=attr(d, "DocumentFileName"),
            date=attr(d, "DocumentDate"),
            gu=attr(d, "DocumentGU"),
        )
        for d in children(child(root, "StudentDocumentDatas"), "StudentDocumentData")
    ]


def parse_document(result: str) -> DocumentData:
    root = load_root(result, "StudentAttachedDocumentData")
    data = child(child(root, "DocumentDatas"), "DocumentData")
    return DocumentData(
        file_name=attr(data, "FileName"),
        file_data=decode_base64(text(data, "Base64Code"), "Base64Code"),
    )
