"""
Synthetic LMS data served by the mock backend.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

MOCK_COURSES: List[Dict[str, Any]] = [
    {
        "id": "course-001",
        "code": "CS301",
        "name": "Advanced Algorithms",
        "description": "Study of advanced algorithmic techniques including dynamic programming, greedy algorithms, and graph algorithms.",
        "credits": 4,
        "semester": "Fall 2024",
        "professor": "Dr. Sarah Williams",
    },
    {
        "id": "course-002",
        "code": "DS201",
        "name": "Machine Learning Fundamentals",
        "description": "Introduction to supervised and unsupervised learning, neural networks, and model evaluation.",
        "credits": 4,
        "semester": "Fall 2024",
        "professor": "Prof. Michael Chen",
    },
    {
        "id": "course-003",
        "code": "AI401",
        "name": "Deep Learning",
        "description": "Advanced topics in deep learning including CNNs, RNNs, transformers, and GANs.",
        "credits": 4,
        "semester": "Fall 2024",
        "professor": "Dr. Emily Rodriguez",
    },
    {
        "id": "course-004",
        "code": "CS202",
        "name": "Database Systems",
        "description": "Relational databases, SQL, NoSQL, database design, and optimization.",
        "credits": 3,
        "semester": "Fall 2024",
        "professor": "Prof. David Lee",
    },
    {
        "id": "course-005",
        "code": "DS301",
        "name": "Data Visualization",
        "description": "Principles and techniques for effective data visualization and storytelling.",
        "credits": 3,
        "semester": "Fall 2024",
        "professor": "Dr. Lisa Anderson",
    },
]

MOCK_GRADES: List[Dict[str, Any]] = [
    {"courseCode": "CS301", "courseName": "Advanced Algorithms", "score": 88, "possible": 100, "grade": "A-"},
    {"courseCode": "DS201", "courseName": "Machine Learning Fundamentals", "score": 92, "possible": 100, "grade": "A"},
    {"courseCode": "CS202", "courseName": "Database Systems", "score": 85, "possible": 100, "grade": "B+"},
    {"courseCode": "DS301", "courseName": "Data Visualization", "score": 95, "possible": 100, "grade": "A"},
]

ENROLLMENT_DATE = datetime(2024, 9, 1, tzinfo=timezone.utc)

MOCK_CONTENT: List[Dict[str, Any]] = [
    {"id": "content-001", "title": "Week 1: Introduction", "description": "Course overview and syllabus",
     "position": 1, "created": datetime(2024, 9, 1, tzinfo=timezone.utc)},
    {"id": "content-002", "title": "Week 2: Fundamentals", "description": "Core concepts and principles",
     "position": 2, "created": datetime(2024, 9, 8, tzinfo=timezone.utc)},
    {"id": "content-003", "title": "Week 3: Advanced Topics", "description": "Deep dive into advanced concepts",
     "position": 3, "created": datetime(2024, 9, 15, tzinfo=timezone.utc)},
]


def find_course(course_id: str) -> Dict[str, Any]:
    """Match a fixture course by id or code; empty dict when unknown."""
    for course in MOCK_COURSES:
        if course_id in (course["id"], course["code"]):
            return course
    return {}


def mock_assignments() -> List[Dict[str, Any]]:
    """Assignments due a few days from now."""
    now = datetime.now(timezone.utc)
    return [
        {"id": "assign-001", "courseCode": "CS301", "name": "Dynamic Programming Assignment",
         "description": "Implement solutions to classic DP problems.",
         "due": now + timedelta(days=5), "points": 100},
        {"id": "assign-002", "courseCode": "DS201", "name": "ML Model Training",
         "description": "Train and evaluate a classification model on the provided dataset.",
         "due": now + timedelta(days=10), "points": 150},
        {"id": "assign-003", "courseCode": "CS202", "name": "Database Design Project",
         "description": "Design and implement a normalized database schema.",
         "due": now + timedelta(days=15), "points": 120},
    ]


def mock_course_announcements() -> List[Dict[str, Any]]:
    three_days_ago = datetime.now(timezone.utc) - timedelta(days=3)
    return [
        {"id": "bb-ann-001", "title": "Welcome to the Course!",
         "body": "Welcome everyone! Looking forward to a great semester.",
         "created": datetime(2024, 9, 1, tzinfo=timezone.utc), "creator": "Dr. Sarah Williams"},
        {"id": "bb-ann-002", "title": "Office Hours Update",
         "body": "Office hours this week will be moved to Thursday 2-4 PM.",
         "created": three_days_ago, "creator": "Dr. Sarah Williams"},
    ]
