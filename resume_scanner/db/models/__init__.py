"""
Database models module.

Imports every model so they are registered with ``Base.metadata`` before
table creation and Alembic autogeneration.
"""
from resume_scanner.db.models.user import User
from resume_scanner.db.models.resume import Resume, ResumeStatus
from resume_scanner.db.models.activity import Activity

__all__ = [
    "User",
    "Resume",
    "ResumeStatus",
    "Activity",
]
