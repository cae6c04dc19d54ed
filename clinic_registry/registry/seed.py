"""Demo roster used when no roster file is supplied."""
from typing import List

from ..matching.models import PatientRecord

DEMO_PATIENT_ROWS = [
    {
        "hn": "HN000001",
        "nationalId": "1234567890123",
        "firstName": "สมชาย",
        "lastName": "ใจดี",
        "firstNameEn": "Somchai",
        "lastNameEn": "Jaidee",
        "dateOfBirth": "1985-06-15",
        "gender": "male",
        "phone": "081-234-5678",
        "email": "somchai@email.com",
        "bloodType": "O+",
        "allergies": "Penicillin;Seafood",
        "createdAt": "2024-01-15T10:30:00Z",
    },
    {
        "hn": "HN000002",
        "nationalId": "2345678901234",
        "firstName": "สมหญิง",
        "lastName": "สวยงาม",
        "firstNameEn": "Somying",
        "lastNameEn": "Suayngam",
        "dateOfBirth": "1990-03-22",
        "gender": "female",
        "phone": "082-345-6789",
        "email": "somying@email.com",
        "bloodType": "A+",
        "allergies": "Aspirin",
        "createdAt": "2024-02-20T09:15:00Z",
    },
]


def demo_patients() -> List[PatientRecord]:
    return [PatientRecord.from_mapping(row) for row in DEMO_PATIENT_ROWS]
