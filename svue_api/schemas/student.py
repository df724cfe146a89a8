# svue_api/schemas/student.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel


class Contact(BaseModel):
    name: str
    relation: str
    phone_numbers: List[str]


class Doctor(BaseModel):
    name: str
    workplace: str
    phone_number: str


class StudentInfo(BaseModel):
    name: str
    id: str
    gender: str
    grade: str
    address: str
    birth_date: str
    email: str
    phone_number: str
    emergency_contacts: List[Contact]
    physician: Doctor
    dentist: Doctor
    school: str


class StaffInfo(BaseModel):
    name: str
    job_title: str
    email: str


class SchoolInfo(BaseModel):
    name: str
    principal: str
    principal_email: str
    address: str
    city: str
    state: str
    zip_code: str
    phone_number: str
    website: str
    staff: List[StaffInfo]


class Document(BaseModel):
    name: str
    file_name: str
    date: str
    gu: str


class DocumentData(BaseModel):
    file_name: str
    file_data: bytes
