"""
Resume endpoints: upload + ATS analysis, CRUD, and dashboard statistics.
"""
import logging
import os
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from resume_scanner.db.models.user import User
from resume_scanner.db.models.resume import ResumeStatus
from resume_scanner.core.auth_dependency import get_db, get_current_user
from resume_scanner.core.errors import server_error
from resume_scanner.schemas.resume import (
    ResumeCreate,
    ResumeUpdate,
    ResumeResponse,
    DashboardStats,
    MessageResponse,
)
from resume_scanner.services import resume_service
from resume_scanner.services.analysis_service import ResumeAnalyzer, build_analyzer
from resume_scanner.services.upload_service import save_pdf_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resume", tags=["Resume"])


def get_analyzer(request: Request) -> ResumeAnalyzer:
    """Analyzer built at startup; built here if the app lifespan did not run."""
    analyzer = getattr(request.app.state, "analyzer", None)
    if analyzer is None:
        analyzer = build_analyzer()
        request.app.state.analyzer = analyzer
    return analyzer


@router.post("/upload", response_model=ResumeResponse)
async def upload_resume(
    resume: UploadFile = File(..., description="PDF resume, max 5MB"),
    title: Optional[str] = Form(None),
    job_role: Optional[str] = Form(None, alias="jobRole"),
    resume_status: Optional[ResumeStatus] = Form(None, alias="status"),
    current_user: User = Depends(get_current_user),
    analyzer: ResumeAnalyzer = Depends(get_analyzer),
    db: Session = Depends(get_db)
):
    """
    Upload a PDF and run the ATS analysis on it.

    Analysis problems never fail the request; a degraded analysis is
    reported through ``formattingIssues`` and ``summary``.
    """
    file_path = await save_pdf_upload(resume)

    analysis_context = job_role or resume_service.DEFAULT_ANALYSIS_CONTEXT
    analysis = await run_in_threadpool(analyzer.analyze, file_path, analysis_context)

    try:
        created = resume_service.create_uploaded_resume(
            db,
            current_user,
            file_path=file_path,
            original_filename=resume.filename,
            analysis=analysis,
            analysis_context=analysis_context,
            title=title,
            job_role=job_role,
            resume_status=resume_status,
        )
    except Exception as e:
        # No row points at the stored file
        if os.path.exists(file_path):
            os.remove(file_path)
        raise server_error(db, "Failed to save uploaded resume", e)

    return ResumeResponse.model_validate(created)


@router.post("", response_model=ResumeResponse)
def create_resume(
    resume_data: ResumeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a resume from JSON fields. No file and no analysis."""
    try:
        created = resume_service.create_resume(db, current_user, resume_data)
        return ResumeResponse.model_validate(created)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error(db, "Failed to create resume", e)


@router.get("", response_model=List[ResumeResponse])
def list_resumes(
    search: Optional[str] = Query(None, description="Substring of title or job role"),
    resume_status: Optional[ResumeStatus] = Query(None, alias="status", description="Filter by status"),
    sort: Optional[str] = Query(None, description="Sort field, e.g. atsScore or updatedAt"),
    order: str = Query("desc", description="asc, anything else sorts descending"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        resumes = resume_service.list_resumes(
            db, current_user, search=search, resume_status=resume_status, sort=sort, order=order
        )
        logger.debug(f"Resumes listed: user_id={current_user.id}, total={len(resumes)}")
        return [ResumeResponse.model_validate(r) for r in resumes]
    except HTTPException:
        raise
    except Exception as e:
        raise server_error(db, "Failed to list resumes", e)


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return resume_service.get_dashboard_stats(db, current_user)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error(db, "Failed to compute dashboard stats", e)


@router.get("/{resume_id}", response_model=ResumeResponse)
def get_resume(
    resume_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        resume = resume_service.get_owned_resume(db, current_user, resume_id)
        return ResumeResponse.model_validate(resume)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error(db, "Failed to get resume", e)


@router.put("/{resume_id}", response_model=ResumeResponse)
def update_resume(
    resume_id: str,
    resume_data: ResumeUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Partial update; only fields present in the body change."""
    try:
        resume = resume_service.update_resume(db, current_user, resume_id, resume_data)
        return ResumeResponse.model_validate(resume)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        raise server_error(db, "Failed to update resume", e)


@router.delete("/{resume_id}", response_model=MessageResponse)
def delete_resume(
    resume_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        resume_service.delete_resume(db, current_user, resume_id)
        return MessageResponse(msg="Resume removed")
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        raise server_error(db, "Failed to delete resume", e)
