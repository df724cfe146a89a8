# svue_api/schemas/gradebook.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, model_serializer


class ReportingPeriod(BaseModel):
    name: str
    start_date: str
    end_date: str


class Category(BaseModel):
    weight: float  # fraction, 0.4 == 40%
    points_earned: float
    points_possible: float


class Assignment(BaseModel):
    name: str
    kind: str
    points_earned: Optional[float] = None  # None == not graded yet
    points_possible: float
    notes: str = ""

    @model_serializer(mode="wrap")
    def _drop_empty_notes(self, handler):
        data = handler(self)
        if not self.notes:
            data.pop("notes", None)
        return data


class Class(BaseModel):
    name: str
    teacher: str
    category: str
    grade: Optional[float] = None
    letter_grade: str
    categories: Dict[str, Category] = {}
    assignments: List[Assignment] = []


class GradebookResponse(BaseModel):
    classes: List[Class]
    report_period: int
    reporting_periods: List[ReportingPeriod]
