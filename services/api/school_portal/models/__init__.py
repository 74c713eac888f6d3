"""SQLAlchemy ORM models.

Models represent database tables:
- students: Admitted students (portal login by reg number + PIN)
- teachers: Staff with assigned classes and subjects
- classes: Class levels
- applications: Admission applications
- results: Term result sheets, ranked per class/term/session
- posts: Public news posts
"""

from school_portal.models.application import Application
from school_portal.models.post import Post
from school_portal.models.result import TermResult
from school_portal.models.school_class import SchoolClass
from school_portal.models.student import Student
from school_portal.models.teacher import Teacher

__all__ = ["Application", "Post", "SchoolClass", "Student", "Teacher", "TermResult"]
