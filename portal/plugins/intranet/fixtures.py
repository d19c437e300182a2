"""
Synthetic intranet data served by the mock backend.
Schedule day_of_week is Monday-based, matching the upstream feed.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

MOCK_STUDENTS: List[Dict[str, Any]] = [
    {
        "id": "user-001",
        "studentId": "STU2024001",
        "email": "john.doe@aivancity.edu",
        "firstName": "John",
        "lastName": "Doe",
        "program": "Computer Science",
        "year": 3,
        "gpa": 3.8,
        "creditsCompleted": 90,
        "totalCredits": 120,
        "expectedGraduation": "2025-06-15",
    },
    {
        "id": "user-002",
        "studentId": "STU2024002",
        "email": "jane.smith@aivancity.edu",
        "firstName": "Jane",
        "lastName": "Smith",
        "program": "Data Science",
        "year": 2,
        "gpa": 3.9,
        "creditsCompleted": 60,
        "totalCredits": 120,
        "expectedGraduation": "2026-06-15",
    },
    {
        "id": "user-003",
        "studentId": "STU2024003",
        "email": "alex.johnson@aivancity.edu",
        "firstName": "Alex",
        "lastName": "Johnson",
        "program": "Artificial Intelligence",
        "year": 1,
        "gpa": 3.5,
        "creditsCompleted": 30,
        "totalCredits": 120,
        "expectedGraduation": "2027-06-15",
    },
]

MOCK_SCHEDULE: List[Dict[str, Any]] = [
    {"courseCode": "CS301", "courseName": "Advanced Algorithms", "dayOfWeek": 0,
     "startTime": "09:00", "endTime": "10:30", "room": "Room 301", "building": "Building A",
     "professor": "Dr. Sarah Williams", "type": "lecture"},
    {"courseCode": "CS301", "courseName": "Advanced Algorithms", "dayOfWeek": 2,
     "startTime": "14:00", "endTime": "16:00", "room": "Lab 102", "building": "Building B",
     "professor": "Dr. Sarah Williams", "type": "lab"},
    {"courseCode": "DS201", "courseName": "Machine Learning Fundamentals", "dayOfWeek": 1,
     "startTime": "10:00", "endTime": "11:30", "room": "Room 205", "building": "Building A",
     "professor": "Prof. Michael Chen", "type": "lecture"},
    {"courseCode": "DS201", "courseName": "Machine Learning Fundamentals", "dayOfWeek": 3,
     "startTime": "15:00", "endTime": "17:00", "room": "Lab 201", "building": "Building C",
     "professor": "Prof. Michael Chen", "type": "lab"},
    {"courseCode": "CS202", "courseName": "Database Systems", "dayOfWeek": 0,
     "startTime": "14:00", "endTime": "15:30", "room": "Room 401", "building": "Building A",
     "professor": "Prof. David Lee", "type": "lecture"},
    {"courseCode": "DS301", "courseName": "Data Visualization", "dayOfWeek": 4,
     "startTime": "09:00", "endTime": "11:00", "room": "Room 302", "building": "Building B",
     "professor": "Dr. Lisa Anderson", "type": "workshop"},
]

MOCK_ATTENDANCE: List[Dict[str, Any]] = [
    {"courseCode": "CS301", "courseName": "Advanced Algorithms", "totalClasses": 24, "attended": 22, "percentage": 91.67},
    {"courseCode": "DS201", "courseName": "Machine Learning Fundamentals", "totalClasses": 24, "attended": 24, "percentage": 100},
    {"courseCode": "CS202", "courseName": "Database Systems", "totalClasses": 20, "attended": 18, "percentage": 90},
    {"courseCode": "DS301", "courseName": "Data Visualization", "totalClasses": 16, "attended": 15, "percentage": 93.75},
]


def mock_announcements() -> List[Dict[str, Any]]:
    """Announcements dated relative to now, like a live feed."""
    now = datetime.now(timezone.utc)
    return [
        {
            "id": "ann-001",
            "title": "Campus Closure - Holiday Break",
            "content": "The campus will be closed from December 20th to January 5th for winter break. Happy holidays!",
            "category": "general",
            "publishedDate": (now - timedelta(days=2)).isoformat(),
            "priority": "high",
        },
        {
            "id": "ann-002",
            "title": "Library Extended Hours During Finals",
            "content": "The library will be open 24/7 during the final exam period (Dec 10-20).",
            "category": "academic",
            "publishedDate": (now - timedelta(days=5)).isoformat(),
            "priority": "medium",
        },
        {
            "id": "ann-003",
            "title": "New AI Lab Equipment Available",
            "content": "State-of-the-art GPU servers are now available for student research projects. Book your time slot online.",
            "category": "facilities",
            "publishedDate": (now - timedelta(days=1)).isoformat(),
            "priority": "medium",
        },
    ]
