"""
Resume model - an uploaded or hand-entered resume plus its latest ATS analysis.
"""
import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Enum, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from resume_scanner.db.base import Base


class ResumeStatus(str, enum.Enum):
    DRAFT = "Draft"
    POLISHING = "Polishing"
    COMPLETED = "Completed"


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String, nullable=False, index=True)
    job_role = Column(String, nullable=False, default="General")
    status = Column(
        Enum(ResumeStatus, name="resume_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ResumeStatus.DRAFT,
    )
    skills = Column(JSON, nullable=False, default=list)

    # Storage path of the uploaded PDF, empty for hand-entered resumes
    file_url = Column(String, nullable=True)
    content = Column(Text, nullable=True)

    ats_score = Column(Integer, nullable=False, default=0)
    keyword_match = Column(Integer, nullable=False, default=0)
    # {missingKeywords, formattingIssues, improvements, summary}
    analysis_results = Column(JSON, nullable=True)
    suggestions = Column(JSON, nullable=False, default=list)
    job_description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", backref="resumes")

    __table_args__ = (
        Index("idx_resume_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<Resume(id={self.id}, title='{self.title}', status='{self.status}')>"
