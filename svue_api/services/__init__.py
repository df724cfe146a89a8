# svue_api/services/__init__.py
"""Service layer."""

from .studentvue_service import StudentVueService

__all__ = ["StudentVueService"]
