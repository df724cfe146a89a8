"""Structural XML -> model translation of StudentVue result documents."""

from .documents import parse_document, parse_document_list
from .gradebook import parse_gradebook
from .student import parse_school_info, parse_student_info

__all__ = [
    "parse_document",
    "parse_document_list",
    "parse_gradebook",
    "parse_school_info",
    "parse_student_info",
]
