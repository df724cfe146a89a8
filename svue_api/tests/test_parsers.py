import math

import pytest

from svue_api.core.errors import GradebookError, ParsingError
from svue_api.parsers import (
    parse_document,
    parse_document_list,
    parse_gradebook,
    parse_school_info,
    parse_student_info,
)
from svue_api.parsers.gradebook import letter_grade, unescape_xml


# ---- gradebook ----

def test_gradebook_periods(load_fixture):
    gb = parse_gradebook(load_fixture("gradebook.xml"))
    assert [p.name for p in gb.reporting_periods] == ["MP1", "MP2"]
    assert gb.reporting_periods[0].start_date == "8/28/2024"
    assert gb.reporting_periods[1].end_date == "1/24/2025"
    assert gb.report_period == 1


def test_gradebook_course_with_mark(load_fixture):
    algebra = parse_gradebook(load_fixture("gradebook.xml")).classes[0]
    assert algebra.name == "Algebra 2 Honors"
    assert algebra.teacher == "Jane Smith"
    assert algebra.category == "Math"
    assert algebra.grade == pytest.approx(91.2)
    # numeric score string gets a letter
    assert algebra.letter_grade == "A"

    assert set(algebra.categories) == {"All Tasks / Assessments", "Practice / Preparation"}
    tasks = algebra.categories["All Tasks / Assessments"]
    assert tasks.weight == pytest.approx(0.9)
    assert tasks.points_earned == pytest.approx(1234.0)
    assert tasks.points_possible == pytest.approx(1300.0)


def test_gradebook_assignments(load_fixture):
    algebra = parse_gradebook(load_fixture("gradebook.xml")).classes[0]
    # "Extra Credit" has no usable points possible and is dropped
    assert [a.name for a in algebra.assignments] == ["Quiz 3 & Review", "Homework 7", "Unit Test"]

    quiz, homework, test = algebra.assignments
    assert quiz.kind == "All Tasks / Assessments"
    assert quiz.points_earned == 18.0
    assert quiz.points_possible == 20.0
    assert quiz.notes == "Retake allowed"

    assert homework.points_earned is None
    assert homework.points_possible == 1000.0
    assert test.points_possible == 100.0


def test_gradebook_assignment_json_omits_empty_notes(load_fixture):
    algebra = parse_gradebook(load_fixture("gradebook.xml")).classes[0]
    quiz, homework, _ = [a.model_dump() for a in algebra.assignments]
    assert quiz["notes"] == "Retake allowed"
    assert "notes" not in homework
    assert homework["points_earned"] is None


def test_gradebook_letter_string_kept(load_fixture):
    english = parse_gradebook(load_fixture("gradebook.xml")).classes[1]
    assert english.letter_grade == "B"
    assert english.grade == 84.0
    assert english.categories == {}
    assert english.assignments == []


def test_gradebook_course_without_mark(load_fixture):
    homeroom = parse_gradebook(load_fixture("gradebook.xml")).classes[2]
    assert homeroom.grade == 0.0
    assert homeroom.letter_grade == "N/A"
    assert homeroom.assignments == []
    assert homeroom.categories == {}


def test_gradebook_unknown_current_period(load_fixture):
    xml = load_fixture("gradebook.xml").replace(
        '<ReportingPeriod GradePeriod="MP2"', '<ReportingPeriod GradePeriod="MP9"'
    )
    with pytest.raises(GradebookError) as exc:
        parse_gradebook(xml)
    assert "gp_idx" in exc.value.message


def test_gradebook_bad_score(load_fixture):
    xml = load_fixture("gradebook.xml").replace('CalculatedScoreRaw="84.0"', 'CalculatedScoreRaw="eighty"')
    with pytest.raises(GradebookError) as exc:
        parse_gradebook(xml)
    assert exc.value.message == "Unable to load Gradebook, message: Bad float"


def test_gradebook_wrong_document():
    with pytest.raises(ParsingError):
        parse_gradebook("<StudentInfo />")


def test_gradebook_garbage():
    with pytest.raises(ParsingError):
        parse_gradebook("this is not xml")


@pytest.mark.parametrize(
    "score,letter",
    [
        (100.0, "A"),
        (89.5, "A"),
        (89.49, "B"),
        (79.5, "B"),
        (70.0, "C"),
        (59.5, "D"),
        (12.0, "E"),
        (-1.0, "E"),
        (math.nan, "N/A"),
    ],
)
def test_letter_grade(score, letter):
    assert letter_grade(score) == letter


def test_unescape_xml():
    assert unescape_xml("Tom &amp; Jerry&apos;s &quot;Quiz&quot; &lt;1&gt;") == "Tom & Jerry's \"Quiz\" <1>"


# ---- student / school ----

def test_student_info(load_fixture):
    info, photo = parse_student_info(load_fixture("student_info.xml"))
    assert info.name == "Alex Q. Student"
    assert info.id == "123456"
    assert info.gender == "Female"
    assert info.grade == "11"
    assert info.address == "12 Elm Street\nRockville, MD 20850"
    assert info.birth_date == "3/14/2008"
    assert info.email == "123456@students.example.org"
    assert info.phone_number == "(301) 555-0100"
    assert info.school == "Example High School"
    assert photo == b"\x89PNG\r\n\x1a\n"


def test_student_contacts_and_doctors(load_fixture):
    info, _ = parse_student_info(load_fixture("student_info.xml"))
    mother, father = info.emergency_contacts
    assert mother.name == "Morgan Student"
    assert mother.relation == "Mother"
    assert mother.phone_numbers == ["(301) 555-0102", "(301) 555-0101", "(301) 555-0103"]
    assert father.phone_numbers == []

    assert info.physician.name == "Dr. Gray"
    assert info.physician.workplace == "Rockville Clinic"
    assert info.dentist.workplace == "Smile Dental"
    assert info.dentist.phone_number == "(301) 555-0120"


def test_student_info_without_photo(load_fixture):
    xml = load_fixture("student_info.xml").replace("<Photo>iVBORw0KGgo=</Photo>", "")
    _, photo = parse_student_info(xml)
    assert photo == b""


def test_student_info_missing_field(load_fixture):
    xml = load_fixture("student_info.xml").replace("<PermID>123456</PermID>", "")
    with pytest.raises(ParsingError):
        parse_student_info(xml)


def test_school_info(load_fixture):
    school = parse_school_info(load_fixture("school_info.xml"))
    assert school.name == "Example High School"
    assert school.principal == "Dana Principal"
    assert school.principal_email == "dana_principal@example.org"
    assert school.address == "1 School Way"
    assert (school.city, school.state, school.zip_code) == ("Rockville", "MD", "20850")
    assert school.phone_number == "(301) 555-0000"
    assert school.website == "https://example.org/ehs"
    assert [(s.name, s.job_title, s.email) for s in school.staff] == [
        ("Jane Smith", "Teacher", "jane_smith@example.org"),
        ("Chris Park", "Counselor", "chris_park@example.org"),
    ]


# ---- documents ----

def test_document_list(load_fixture):
    docs = parse_document_list(load_fixture("documents.xml"))
    assert [d.model_dump() for d in docs] == [
        {"name": "Report Card", "file_name": "Report Card MP1.pdf", "date": "11/15/2024", "gu": "D-1"},
        {"name": "Fall Schedule", "file_name": "schedule.txt", "date": "8/20/2024", "gu": "D-2"},
    ]


def test_document_content(load_fixture):
    doc = parse_document(load_fixture("document.xml"))
    assert doc.file_name == "Report Card MP1.pdf"
    assert doc.file_data == b"%PDF-1.4"


def test_document_content_missing_data(load_fixture):
    xml = load_fixture("document.xml").replace("<Base64Code>JVBERi0xLjQ=</Base64Code>", "")
    with pytest.raises(ParsingError):
        parse_document(xml)
