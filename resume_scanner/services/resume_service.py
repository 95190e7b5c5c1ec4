"""
Resume persistence, ownership checks, activity logging and dashboard stats.

Every function takes the authenticated ``User`` and only ever touches that
user's rows. A resume that exists but belongs to someone else is reported as
401, an unknown id as 404.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from resume_scanner.db.models.user import User
from resume_scanner.db.models.resume import Resume, ResumeStatus
from resume_scanner.db.models.activity import (
    Activity,
    CREATED_RESUME,
    UPDATED_RESUME,
    DELETED_RESUME,
    UPLOADED_RESUME,
)
from resume_scanner.schemas.resume import (
    ResumeCreate,
    ResumeUpdate,
    DashboardStats,
    StatusCount,
    ActivityEntity,
    ActivityResponse,
)
from resume_scanner.services.analysis_service import AnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_JOB_ROLE = "General"
DEFAULT_ANALYSIS_CONTEXT = "General Professional Role"
RECENT_ACTIVITY_LIMIT = 5

# API sort key -> column
SORT_FIELDS = {
    "title": Resume.title,
    "jobRole": Resume.job_role,
    "status": Resume.status,
    "atsScore": Resume.ats_score,
    "keywordMatch": Resume.keyword_match,
    "createdAt": Resume.created_at,
    "updatedAt": Resume.updated_at,
}

# Dashboard histogram order
STATUS_ORDER = [ResumeStatus.COMPLETED, ResumeStatus.POLISHING, ResumeStatus.DRAFT]

NON_NULLABLE_FIELDS = {"title", "job_role", "status", "skills", "ats_score", "keyword_match", "suggestions"}


def record_activity(db: Session, user_id: int, entity_id: Optional[int], action: str) -> Activity:
    """Append an activity row to the session; committed with the caller's transaction."""
    activity = Activity(user_id=user_id, entity_id=entity_id, action=action)
    db.add(activity)
    return activity


# Largest value a 64-bit integer primary key can hold
MAX_RESUME_ID = 2 ** 63 - 1


def parse_resume_id(resume_id: str) -> Optional[int]:
    try:
        value = int(resume_id)
    except (TypeError, ValueError):
        return None
    return value if 0 < value <= MAX_RESUME_ID else None


def get_owned_resume(db: Session, user: User, resume_id: str) -> Resume:
    """Fetch a resume and check it belongs to ``user``. Malformed ids are simply not found."""
    parsed_id = parse_resume_id(resume_id)
    resume = db.get(Resume, parsed_id) if parsed_id is not None else None
    if resume is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found")
    if resume.user_id != user.id:
        logger.warning(f"Cross-user resume access denied: resume_id={resume_id}, user_id={user.id}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized")
    return resume


def create_resume(db: Session, user: User, data: ResumeCreate) -> Resume:
    resume = Resume(
        user_id=user.id,
        title=data.title,
        job_role=data.job_role or DEFAULT_JOB_ROLE,
        status=data.status,
        skills=data.skills,
        content=data.content,
        ats_score=data.ats_score,
        keyword_match=data.keyword_match,
        suggestions=data.suggestions,
        job_description=data.job_description,
    )
    db.add(resume)
    db.flush()
    record_activity(db, user.id, resume.id, CREATED_RESUME)
    db.commit()
    db.refresh(resume)

    logger.info(f"Resume created: resume_id={resume.id}, user_id={user.id}")
    return resume


def create_uploaded_resume(
    db: Session,
    user: User,
    *,
    file_path: str,
    original_filename: str,
    analysis: AnalysisResult,
    analysis_context: str,
    title: Optional[str] = None,
    job_role: Optional[str] = None,
    resume_status: Optional[ResumeStatus] = None,
) -> Resume:
    """Persist an analyzed upload together with its activity entry."""
    resume = Resume(
        user_id=user.id,
        title=title or original_filename,
        job_role=job_role or DEFAULT_JOB_ROLE,
        status=resume_status or ResumeStatus.DRAFT,
        file_url=file_path,
        content=analysis.resume_text,
        ats_score=analysis.ats_score,
        keyword_match=analysis.keyword_match,
        analysis_results=analysis.feedback(),
        suggestions=list(analysis.improvements),
        job_description=analysis_context,
    )
    db.add(resume)
    db.flush()
    record_activity(db, user.id, resume.id, UPLOADED_RESUME)
    db.commit()
    db.refresh(resume)

    logger.info(
        f"Resume uploaded: resume_id={resume.id}, user_id={user.id}, ats_score={resume.ats_score}"
    )
    return resume


def list_resumes(
    db: Session,
    user: User,
    search: Optional[str] = None,
    resume_status: Optional[ResumeStatus] = None,
    sort: Optional[str] = None,
    order: str = "desc",
) -> List[Resume]:
    """
    List the user's resumes.

    ``search`` matches title or job role case-insensitively. Results are
    ordered by ``sort`` (default ``updatedAt``) with id as a tie-breaker, so
    identical queries return identical ordering.
    """
    query = db.query(Resume).filter(Resume.user_id == user.id)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Resume.title.ilike(search_term),
                Resume.job_role.ilike(search_term)
            )
        )

    if resume_status:
        query = query.filter(Resume.status == resume_status)

    if sort and sort not in SORT_FIELDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid sort field. Use one of: {', '.join(SORT_FIELDS)}"
        )
    column = SORT_FIELDS[sort or "updatedAt"]
    ascending = bool(sort) and (order or "").lower() == "asc"
    if ascending:
        query = query.order_by(column.asc(), Resume.id.asc())
    else:
        query = query.order_by(column.desc(), Resume.id.desc())

    return query.all()


def update_resume(db: Session, user: User, resume_id: str, data: ResumeUpdate) -> Resume:
    """Apply the fields present in ``data``; explicit nulls on required fields are ignored."""
    resume = get_owned_resume(db, user, resume_id)

    update_data = data.model_dump(exclude_unset=True)
    if "analysis_results" in update_data and data.analysis_results is not None:
        update_data["analysis_results"] = data.analysis_results.model_dump(by_alias=True)

    for field, value in update_data.items():
        if value is None and field in NON_NULLABLE_FIELDS:
            continue
        setattr(resume, field, value)
    resume.updated_at = datetime.now(timezone.utc)

    record_activity(db, user.id, resume.id, UPDATED_RESUME)
    db.commit()
    db.refresh(resume)

    logger.info(f"Resume updated: resume_id={resume.id}, user_id={user.id}, fields={list(update_data)}")
    return resume


def delete_resume(db: Session, user: User, resume_id: str) -> None:
    resume = get_owned_resume(db, user, resume_id)
    deleted_id = resume.id

    db.delete(resume)
    # Activity keeps the id of the deleted resume
    record_activity(db, user.id, deleted_id, DELETED_RESUME)
    db.commit()

    logger.info(f"Resume deleted: resume_id={deleted_id}, user_id={user.id}")


def get_dashboard_stats(db: Session, user: User) -> DashboardStats:
    total, avg_score = (
        db.query(func.count(Resume.id), func.avg(Resume.ats_score))
        .filter(Resume.user_id == user.id)
        .one()
    )

    counts = dict(
        db.query(Resume.status, func.count(Resume.id))
        .filter(Resume.user_id == user.id)
        .group_by(Resume.status)
        .all()
    )
    distribution = [
        StatusCount(name=s.value, value=counts.get(s, 0)) for s in STATUS_ORDER
    ]

    activities = (
        db.query(Activity)
        .filter(Activity.user_id == user.id)
        .order_by(Activity.timestamp.desc(), Activity.id.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )
    entity_ids = {a.entity_id for a in activities if a.entity_id is not None}
    titles = {}
    if entity_ids:
        titles = dict(
            db.query(Resume.id, Resume.title)
            .filter(Resume.user_id == user.id, Resume.id.in_(entity_ids))
            .all()
        )

    recent = [
        ActivityResponse(
            id=a.id,
            user_id=a.user_id,
            entity_id=a.entity_id,
            entity=ActivityEntity(id=a.entity_id, title=titles[a.entity_id]) if a.entity_id in titles else None,
            action=a.action,
            timestamp=a.timestamp,
        )
        for a in activities
    ]

    return DashboardStats(
        total_resumes=total or 0,
        avg_ats_score=round(float(avg_score), 1) if total else 0.0,
        status_distribution=distribution,
        recent_activities=recent,
    )
