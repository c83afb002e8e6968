"""
B.I Booster Backend — ORM Models
==================================

Importing this package registers every table with Base.metadata, which
Alembic autogenerate and the test suite's create_all() rely on.

Tables:
    users          → models/user.py
    orders         → models/order.py
    modules        → models/course.py (CourseModule)
    chapters       → models/course.py (Chapter)
    lessons        → models/course.py (Lesson)
    user_progress  → models/progress.py (UserProgress)
"""

from bibooster.models.user import User
from bibooster.models.order import Order
from bibooster.models.course import CourseModule, Chapter, Lesson
from bibooster.models.progress import UserProgress

__all__ = ["User", "Order", "CourseModule", "Chapter", "Lesson", "UserProgress"]
