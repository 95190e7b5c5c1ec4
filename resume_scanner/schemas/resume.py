"""
Pydantic schemas for resume endpoints.

Field names are snake_case in Python and camelCase on the wire.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from resume_scanner.db.models.resume import ResumeStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AnalysisResults(CamelModel):
    """Feedback portion of an ATS analysis as stored on a resume."""
    missing_keywords: List[str] = Field(default_factory=list)
    formatting_issues: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    summary: str = "No analysis available."


class ResumeCreate(CamelModel):
    """Schema for creating a resume by hand (no file, no analysis)."""
    title: str = Field(..., min_length=1, max_length=255, description="Resume title")
    job_role: str = Field("General", max_length=255, description="Target job role")
    status: ResumeStatus = Field(ResumeStatus.DRAFT, description="Workflow status")
    skills: List[str] = Field(default_factory=list)
    content: Optional[str] = None
    ats_score: int = Field(0, ge=0, le=100)
    keyword_match: int = Field(0, ge=0, le=100)
    suggestions: List[str] = Field(default_factory=list)
    job_description: Optional[str] = None


class ResumeUpdate(CamelModel):
    """Schema for a partial update; only fields present in the body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    job_role: Optional[str] = Field(None, max_length=255)
    status: Optional[ResumeStatus] = None
    skills: Optional[List[str]] = None
    content: Optional[str] = None
    ats_score: Optional[int] = Field(None, ge=0, le=100)
    keyword_match: Optional[int] = Field(None, ge=0, le=100)
    analysis_results: Optional[AnalysisResults] = None
    suggestions: Optional[List[str]] = None
    job_description: Optional[str] = None


class ResumeResponse(CamelModel):
    """Schema for resume response."""
    id: int
    user_id: int
    title: str
    job_role: str
    status: ResumeStatus
    skills: List[str] = Field(default_factory=list)
    file_url: Optional[str] = None
    content: Optional[str] = None
    ats_score: int = 0
    keyword_match: int = 0
    analysis_results: Optional[AnalysisResults] = None
    suggestions: List[str] = Field(default_factory=list)
    job_description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class StatusCount(BaseModel):
    name: str
    value: int


class ActivityEntity(BaseModel):
    id: int
    title: str


class ActivityResponse(CamelModel):
    id: int
    user_id: int
    entity_id: Optional[int] = None
    # Populated with the resume title while the resume still exists
    entity: Optional[ActivityEntity] = None
    action: str
    timestamp: datetime


class DashboardStats(CamelModel):
    total_resumes: int
    avg_ats_score: float
    status_distribution: List[StatusCount]
    recent_activities: List[ActivityResponse]


class MessageResponse(BaseModel):
    msg: str
