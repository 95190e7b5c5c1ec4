from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from resume_scanner.db.base import Base


class Activity(Base):
    """
    Append-only audit trail of resume operations.

    ``entity_id`` is not a foreign key; entries outlive
    the resume they point at.
    """
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    entity_id = Column(Integer, nullable=True)
    action = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_activity_user_timestamp", "user_id", "timestamp"),
    )


# Action labels recorded by the resume service
CREATED_RESUME = "Created Resume"
UPDATED_RESUME = "Updated Resume"
DELETED_RESUME = "Deleted Resume"
UPLOADED_RESUME = "Uploaded & Analyzed Resume"
