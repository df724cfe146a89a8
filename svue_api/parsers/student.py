from __future__ import annotations

from typing import Tuple

from bs4.element import Tag

from svue_api.parsers.common import attr, child, children, decode_base64, load_root, text
from svue_api.schemas.student import Contact, Doctor, SchoolInfo, StaffInfo, StudentInfo


def parse_contact(node: Tag) -> Contact:
    # mobile first: it's the number most likely to be answered
    numbers = [
        node.get(key, "")
        for key in ("MobilePhone", "HomePhone", "WorkPhone", "OtherPhone")
    ]
    return Contact(
        name=attr(node, "Name"),
        relation=attr(node, "Relationship"),
        phone_numbers=[n for n in numbers if n],
    )


def parse_doctor(node: Tag, workplace_attr: str) -> Doctor:
    return Doctor(
        name=attr(node, "Name"),
        workplace=attr(node, workplace_attr),
        phone_number=attr(node, "Phone"),
    )


def parse_student_info(result: str) -> Tuple[StudentInfo, bytes]:
    """StudentInfo result -> (profile, photo bytes). Photo is b"" when absent."""
    root = load_root(result, "StudentInfo")

    photo_node = root.find("Photo", recursive=False)
    photo = decode_base64(photo_node.get_text(), "Photo") if photo_node is not None else b""

    info = StudentInfo(
        name=text(root, "FormattedName"),
        id=text(root, "PermID"),
        gender=text(root, "Gender"),
        grade=text(root, "Grade"),
        address=text(root, "Address").replace("<br>", "\n"),
        birth_date=text(root, "BirthDate"),
        email=text(root, "EMail"),
        phone_number=text(root, "Phone"),
        emergency_contacts=[
            parse_contact(c) for c in children(child(root, "EmergencyContacts"), "EmergencyContact")
        ],
        physician=parse_doctor(child(root, "Physician"), "Hospital"),
        dentist=parse_doctor(child(root, "Dentist"), "Office"),
        school=text(root, "CurrentSchool"),
    )
    return info, photo


def parse_school_info(result: str) -> SchoolInfo:
    root = load_root(result, "StudentSchoolInfoListing")

    return SchoolInfo(
        name=attr(root, "School"),
        principal=attr(root, "Principal"),
        principal_email=attr(root, "PrincipalEmail"),
        address=attr(root, "SchoolAddress"),
        city=attr(root, "SchoolCity"),
        state=attr(root, "SchoolState"),
        zip_code=attr(root, "SchoolZip"),
        phone_number=attr(root, "Phone"),
        website=attr(root, "URL"),
        staff=[
            StaffInfo(
                name=attr(s, "Name"),
                job_title=attr(s, "Title"),
                email=attr(s, "EMail"),
            )
            for s in children(child(root, "StaffLists"), "StaffList")
        ],
    )
