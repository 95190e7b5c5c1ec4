"""
ATS analysis of uploaded resumes.

Extracts text from a stored PDF with PyMuPDF and asks OpenAI for a structured
ATS score, walking an ordered chain of models. The analyzer never raises:
extraction failures become a sentinel text, and any upstream failure becomes
the fixed fallback result, so an upload always gets a well-formed analysis.
"""
import json
import logging
import re
from typing import Any, List, Optional

import fitz  # pymupdf
from openai import RateLimitError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from resume_scanner.core import config
from resume_scanner.llm.openai_provider import OpenAIProvider
from resume_scanner.llm.router import get_model_chain, is_ai_configured

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_TEXT = "Error extracting text from PDF."
EMPTY_RESUME_TEXT = "Empty resume content."
DEFAULT_FALLBACK_MESSAGE = "Could not analyze resume."
DEFAULT_SUMMARY = "No analysis available."
CHAIN_EXHAUSTED_MESSAGE = "Analysis failed: all models are rate limited"

# First '{' to last '}': models often wrap the JSON in prose or code fences
JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

PROMPT_TEMPLATE = """
You are an expert Resume Analyst and ATS (Applicant Tracking System) simulator.

Analyze the following resume against the provided job description (or general role if the JD is vague).

Resume Text:
"{resume_text}"

Job Description:
"{job_description}"

Provide a detailed analysis in JSON format. Return ONLY the raw JSON string. Structure:
{{
    "atsScore": (0-100 score),
    "keywordMatch": (0-100 score),
    "missingKeywords": ["list"],
    "formattingIssues": ["list"],
    "improvements": ["list"],
    "summary": "Professional summary."
}}
"""


# ============================================
# Result model
# ============================================

class AnalysisResult(BaseModel):
    """Structured ATS analysis. Serializes with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ats_score: int = Field(0, ge=0, le=100)
    keyword_match: int = Field(0, ge=0, le=100)
    missing_keywords: List[str] = Field(default_factory=list)
    formatting_issues: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    summary: str = DEFAULT_SUMMARY
    # Text the analysis was based on; persisted as the resume content
    resume_text: str = Field("", exclude=True)

    @field_validator("ats_score", "keyword_match", mode="before")
    @classmethod
    def clamp_score(cls, v: Any) -> int:
        """Missing or unreadable scores count as 0."""
        if isinstance(v, str):
            v = v.strip().rstrip("%")
        try:
            score = round(float(v))
        except (TypeError, ValueError, OverflowError):
            return 0
        return max(0, min(100, score))

    @field_validator("missing_keywords", "formatting_issues", "improvements", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v]
        return [str(v)]

    @field_validator("summary", mode="before")
    @classmethod
    def default_summary(cls, v: Any) -> str:
        return str(v) if v else DEFAULT_SUMMARY

    def feedback(self) -> dict:
        """The ``analysisResults`` document stored on a resume."""
        return self.model_dump(
            by_alias=True,
            include={"missing_keywords", "formatting_issues", "improvements", "summary"},
        )


def get_fallback_result(message: str = "") -> AnalysisResult:
    """Canned analysis used when real scoring is unavailable or fails."""
    return AnalysisResult(
        ats_score=75,
        keyword_match=60,
        missing_keywords=["React", "Node.js", "Docker", "AWS"],
        formatting_issues=[message or DEFAULT_FALLBACK_MESSAGE],
        improvements=["Quantify achievements", "Update skills section"],
        summary="Fallback analysis due to technical issue.",
    )


# ============================================
# Helpers
# ============================================

def extract_json_object(text: str) -> dict:
    """
    Parse the brace-delimited JSON object embedded in a model reply.

    Raises:
        ValueError: If no object is found or it is not valid JSON
    """
    match = JSON_OBJECT_RE.search(text or "")
    if not match:
        raise ValueError("No valid JSON found in AI response")
    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("AI response JSON is not an object")
    return data


def is_quota_error(exc: Exception) -> bool:
    """True for rate-limit / quota-exhaustion errors, which are worth retrying on another model."""
    if isinstance(exc, RateLimitError):
        return True
    # Parse/validation failures can echo "429" from the reply body
    if isinstance(exc, ValueError):
        return False
    if getattr(exc, "status_code", None) == 429:
        return True
    message = str(exc).lower()
    return "quota" in message or "rate limit" in message or "429" in message


def short_error(exc: Exception) -> str:
    """First line of an exception message, or its class name when empty."""
    lines = str(exc).strip().splitlines()
    return lines[0] if lines else type(exc).__name__


def build_prompt(resume_text: str, job_description: str, max_chars: int = config.MAX_RESUME_CHARS) -> str:
    return PROMPT_TEMPLATE.format(
        resume_text=resume_text[:max_chars],
        job_description=job_description,
    )


# ============================================
# Analyzer
# ============================================

class ResumeAnalyzer:
    """
    Turns a stored PDF plus a role/job description into an ``AnalysisResult``.

    ``provider`` is anything with an OpenAI-style ``chat(messages, model)``
    returning an object with ``content``. ``None`` means no credential is
    configured and every analysis is the fallback result.
    """

    def __init__(
        self,
        provider: Optional[OpenAIProvider] = None,
        models: Optional[List[str]] = None,
        max_chars: int = config.MAX_RESUME_CHARS,
    ):
        self.provider = provider
        self.models = get_model_chain(models)
        self.max_chars = max_chars

    def extract_text(self, file_path: str) -> str:
        """Extract plain text from a PDF; returns a sentinel string instead of raising."""
        try:
            logger.info(f"Extracting text from: {file_path}")
            with open(file_path, "rb") as f:
                data = f.read()

            with fitz.open(stream=data, filetype="pdf") as doc:
                text = "".join(page.get_text() for page in doc)

            if not text.strip():
                logger.warning("PDF extraction returned no text")
                return EMPTY_RESUME_TEXT

            logger.info(f"Successfully extracted {len(text)} characters")
            return text
        except Exception as e:
            logger.error(f"Error extracting text from PDF {file_path}: {e}", exc_info=True)
            return EXTRACTION_FAILED_TEXT

    def score(self, resume_text: str, job_description: str) -> AnalysisResult:
        """Score resume text, walking the model chain. Never raises."""
        if self.provider is None:
            logger.warning("Using fallback analysis: OPENAI_API_KEY is not configured")
            return get_fallback_result()

        prompt = build_prompt(resume_text, job_description, self.max_chars)
        messages = [{"role": "user", "content": prompt}]

        for model in self.models:
            try:
                logger.info(f"Sending analysis prompt to {model}")
                response = self.provider.chat(messages=messages, model=model)
                result = AnalysisResult.model_validate(extract_json_object(response.content))
                logger.info(f"Analysis completed with {model}: ats_score={result.ats_score}")
                return result
            except Exception as e:
                if is_quota_error(e):
                    logger.warning(f"{model} is rate limited or out of quota, trying next model: {e}")
                    continue
                if isinstance(e, ValidationError):
                    logger.error(f"{model} returned an analysis with the wrong shape: {e}")
                else:
                    logger.error(f"Error analyzing resume with {model}: {e}", exc_info=True)
                return get_fallback_result(f"Analysis failed: {short_error(e)}")

        logger.error(f"All models exhausted without a result: {self.models}")
        return get_fallback_result(CHAIN_EXHAUSTED_MESSAGE)

    def analyze(self, file_path: str, job_description: str) -> AnalysisResult:
        """Extract text from ``file_path`` and score it against ``job_description``."""
        resume_text = self.extract_text(file_path)
        result = self.score(resume_text, job_description)
        return result.model_copy(update={"resume_text": resume_text})


def build_analyzer() -> ResumeAnalyzer:
    """Analyzer wired from configuration; degraded (fallback-only) without an API key."""
    provider = None
    if is_ai_configured():
        try:
            provider = OpenAIProvider(api_key=config.OPENAI_API_KEY, timeout=config.AI_TIMEOUT_SECONDS)
        except Exception as e:
            logger.warning(f"Failed to initialize OpenAI provider: {e}, using fallback analysis")
    else:
        logger.info("OPENAI_API_KEY not configured - resume analysis will return the fallback result")
    return ResumeAnalyzer(provider=provider, models=config.AI_MODELS)
