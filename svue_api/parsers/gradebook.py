"""
Gradebook result -> GradebookResponse.

The mapping is structural: every value comes straight from an attribute of
the upstream document. The only derived values are the current reporting
period index, the letter grade when StudentVue reports a number instead of a
letter, and category weights as fractions.
"""
from __future__ import annotations

import math
from typing import Dict, List, Optional

from bs4.element import Tag

from svue_api.core.errors import GradebookError
from svue_api.parsers.common import attr, attr_opt, child, children, finite_or_none, load_root
from svue_api.schemas.gradebook import (
    Assignment,
    Category,
    Class,
    GradebookResponse,
    ReportingPeriod,
)

# (lowest score, letter), highest first
LETTER_CUTOFFS = (
    (89.5, "A"),
    (79.5, "B"),
    (69.5, "C"),
    (59.5, "D"),
)


def _float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise GradebookError("Bad float")


def _points(value: Optional[str]) -> Optional[float]:
    """Lenient number parsing for point strings like "1,250" or " 10 "."""
    if value is None:
        return None
    try:
        return float(value.replace(",", "").strip())
    except ValueError:
        return None


def unescape_xml(value: str) -> str:
    # names arrive entity-encoded a second time
    return (
        value.replace("&apos;", "'")
        .replace("&quot;", '"')
        .replace("&amp;", "&")
        .replace("&lt;", "<")
        .replace("&gt;", ">")
    )


def letter_grade(score: float) -> str:
    for cutoff, letter in LETTER_CUTOFFS:
        if score >= cutoff:
            return letter
    return "E" if math.isfinite(score) else "N/A"


def points_possible(assignment: Tag) -> Optional[float]:
    possible = finite_or_none(_points(attr_opt(assignment, "ScoreMaxValue")))
    if possible is not None:
        return possible

    # "8 / 10", "10.0000 Points Possible"
    raw = attr(assignment, "Points")
    if "/" in raw:
        return finite_or_none(_points(raw.split("/", 1)[1]))
    return finite_or_none(_points(raw.replace("Points Possible", "")))


def parse_assignment(assignment: Tag) -> Optional[Assignment]:
    possible = points_possible(assignment)
    if possible is None:
        # nothing to grade against: upstream shows these as "Not Graded"
        return None

    return Assignment(
        name=unescape_xml(attr(assignment, "Measure")),
        kind=attr(assignment, "Type"),
        points_earned=finite_or_none(_points(attr_opt(assignment, "ScoreCalValue"))),
        points_possible=possible,
        notes=attr_opt(assignment, "Notes", "") or "",
    )


def parse_categories(mark: Tag) -> Dict[str, Category]:
    categories: Dict[str, Category] = {}
    summary = mark.find("GradeCalculationSummary", recursive=False)
    if summary is None:
        return categories

    for calc in children(summary, "AssignmentGradeCalc"):
        kind = attr(calc, "Type")
        if kind == "TOTAL":
            continue

        categories[kind] = Category(
            weight=_float(attr(calc, "Weight").strip("%")) / 100.0,
            points_earned=_float(attr(calc, "Points").replace(",", "")),
            points_possible=_float(attr(calc, "PointsPossible").replace(",", "")),
        )
    return categories


def parse_course(course: Tag) -> Class:
    name = attr(course, "Title")
    teacher = attr(course, "Staff")
    category = attr(course, "ImageType")

    mark = child(course, "Marks").find("Mark", recursive=False)
    if mark is None:
        # some courses (homeroom, lunch) never carry a mark
        return Class(
            name=name,
            teacher=teacher,
            category=category,
            grade=0.0,
            letter_grade="N/A",
        )

    grade = _float(attr(mark, "CalculatedScoreRaw"))
    letter = attr(mark, "CalculatedScoreString")
    if any(ch.isdigit() for ch in letter):
        letter = letter_grade(grade)

    assignments: List[Assignment] = []
    for node in children(child(mark, "Assignments"), "Assignment"):
        parsed = parse_assignment(node)
        if parsed is not None:
            assignments.append(parsed)

    return Class(
        name=name,
        teacher=teacher,
        category=category,
        grade=finite_or_none(grade),
        letter_grade=letter,
        categories=parse_categories(mark),
        assignments=assignments,
    )


def parse_gradebook(result: str) -> GradebookResponse:
    root = load_root(result, "Gradebook")

    reporting_periods = [
        ReportingPeriod(
            name=attr(period, "GradePeriod"),
            start_date=attr(period, "StartDate"),
            end_date=attr(period, "EndDate"),
        )
        for period in children(child(root, "ReportingPeriods"), "ReportPeriod")
    ]

    current = attr(child(root, "ReportingPeriod"), "GradePeriod")
    index = next((i for i, p in enumerate(reporting_periods) if p.name == current), None)
    if index is None:
        raise GradebookError("Missing field 'gp_idx'")

    return GradebookResponse(
        classes=[parse_course(course) for course in children(child(root, "Courses"), "Course")],
        report_period=index,
        reporting_periods=reporting_periods,
    )
