"""
Tests for the resume analyzer: PDF extraction, model fallback chain and the
canned fallback result.
"""
import fitz
import httpx
import pytest
from openai import RateLimitError, AuthenticationError

from resume_scanner.core import config
from resume_scanner.llm.openai_provider import LLMResponse
from resume_scanner.services.analysis_service import (
    AnalysisResult,
    ResumeAnalyzer,
    build_analyzer,
    build_prompt,
    extract_json_object,
    get_fallback_result,
    is_quota_error,
    CHAIN_EXHAUSTED_MESSAGE,
    EMPTY_RESUME_TEXT,
    EXTRACTION_FAILED_TEXT,
)

GOOD_REPLY = """Sure! Here is the analysis:
```json
{
    "atsScore": 88,
    "keywordMatch": 64,
    "missingKeywords": ["GraphQL"],
    "formattingIssues": [],
    "improvements": ["Lead with impact"],
    "summary": "Solid fit."
}
```
Let me know if you need anything else."""

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def rate_limit_error(message="You exceeded your current quota"):
    response = httpx.Response(429, request=httpx.Request("POST", OPENAI_URL))
    return RateLimitError(message, response=response, body=None)


def auth_error():
    response = httpx.Response(401, request=httpx.Request("POST", OPENAI_URL))
    return AuthenticationError("Incorrect API key provided", response=response, body=None)


class FakeProvider:
    """Scripted provider: each model maps to a reply string or an exception."""

    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = []
        self.prompts = []

    def chat(self, messages, model, **kwargs):
        self.calls.append(model)
        self.prompts.append(messages[-1]["content"])
        outcome = self.outcomes[model]
        if isinstance(outcome, Exception):
            raise outcome
        return LLMResponse(content=outcome, model=model)


def make_pdf(path, text=None):
    doc = fitz.open()
    page = doc.new_page()
    if text:
        page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return str(path)


MODELS = ["model-a", "model-b", "model-c"]


# ============================================
# Fallback result
# ============================================

def test_fallback_result_shape():
    result = get_fallback_result()

    assert result.ats_score == 75
    assert result.keyword_match == 60
    assert result.missing_keywords == ["React", "Node.js", "Docker", "AWS"]
    assert result.formatting_issues == ["Could not analyze resume."]
    assert result.improvements == ["Quantify achievements", "Update skills section"]
    assert result.summary == "Fallback analysis due to technical issue."


def test_fallback_result_carries_message():
    assert get_fallback_result("Analysis failed: boom").formatting_issues == ["Analysis failed: boom"]


def test_missing_credential_returns_fallback(tmp_path):
    analyzer = ResumeAnalyzer(provider=None, models=MODELS)

    result = analyzer.analyze(make_pdf(tmp_path / "cv.pdf", "Python developer"), "Backend Engineer")

    assert result.ats_score == 75
    assert result.keyword_match == 60
    assert result.formatting_issues == ["Could not analyze resume."]


def test_build_analyzer_without_key_is_degraded(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", None)

    analyzer = build_analyzer()

    assert analyzer.provider is None
    assert analyzer.score("text", "role").summary == "Fallback analysis due to technical issue."


# ============================================
# Model chain
# ============================================

def test_first_successful_model_wins():
    provider = FakeProvider({m: GOOD_REPLY for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.score("resume", "Backend Engineer")

    assert provider.calls == ["model-a"]
    assert result.ats_score == 88
    assert result.keyword_match == 64
    assert result.missing_keywords == ["GraphQL"]
    assert result.summary == "Solid fit."


def test_quota_error_advances_to_next_model():
    provider = FakeProvider({
        "model-a": rate_limit_error(),
        "model-b": GOOD_REPLY,
        "model-c": GOOD_REPLY,
    })
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.score("resume", "Backend Engineer")

    assert provider.calls == ["model-a", "model-b"]
    assert result.ats_score == 88


def test_quota_message_without_status_advances():
    provider = FakeProvider({
        "model-a": RuntimeError("Resource has been exhausted (e.g. check quota)."),
        "model-b": GOOD_REPLY,
        "model-c": GOOD_REPLY,
    })
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    analyzer.score("resume", "role")

    assert provider.calls == ["model-a", "model-b"]


@pytest.mark.parametrize("error", [auth_error(), RuntimeError("connection reset by peer")])
def test_other_errors_stop_the_chain(error):
    provider = FakeProvider({m: error if m == "model-a" else GOOD_REPLY for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.score("resume", "role")

    assert provider.calls == ["model-a"]
    assert result.ats_score == 75
    assert result.formatting_issues[0].startswith("Analysis failed: ")


def test_reply_without_json_falls_back_without_trying_more_models():
    provider = FakeProvider({m: "I cannot help with that." for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.score("resume", "role")

    assert provider.calls == ["model-a"]
    assert result.formatting_issues == ["Analysis failed: No valid JSON found in AI response"]


def test_reply_without_scores_keeps_the_analysis():
    reply = '{"keywordMatch": 55, "missingKeywords": ["SQL"], "summary": "Real analysis"}'
    provider = FakeProvider({m: reply for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.score("resume", "role")

    assert provider.calls == ["model-a"]
    assert result.ats_score == 0
    assert result.keyword_match == 55
    assert result.missing_keywords == ["SQL"]
    assert result.summary == "Real analysis"


def test_reply_with_null_scores_keeps_the_analysis():
    reply = '{"atsScore": null, "keywordMatch": "n/a", "summary": "Real analysis"}'
    provider = FakeProvider({m: reply for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.score("resume", "role")

    assert result.ats_score == 0
    assert result.keyword_match == 0
    assert result.summary == "Real analysis"
    assert result.formatting_issues == []


def test_failure_message_is_one_line():
    error = RuntimeError("connection reset by peer\nFor further information visit https://example.com")
    provider = FakeProvider({m: error for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.score("resume", "role")

    assert result.formatting_issues == ["Analysis failed: connection reset by peer"]


def test_all_models_rate_limited_returns_fallback():
    provider = FakeProvider({m: rate_limit_error() for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.score("resume", "role")

    assert provider.calls == MODELS
    assert result.ats_score == 75
    assert result.formatting_issues == [CHAIN_EXHAUSTED_MESSAGE]


def test_prompt_truncates_resume_and_includes_job_description():
    provider = FakeProvider({m: GOOD_REPLY for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    analyzer.score("x" * 20000, "Site Reliability Engineer")

    prompt = provider.prompts[0]
    assert "x" * 15000 in prompt
    assert "x" * 15001 not in prompt
    assert "Site Reliability Engineer" in prompt


def test_same_prompt_is_sent_to_each_model():
    provider = FakeProvider({"model-a": rate_limit_error(), "model-b": GOOD_REPLY, "model-c": GOOD_REPLY})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    analyzer.score("resume text", "role")

    assert provider.prompts[0] == provider.prompts[1]


def test_duplicate_models_are_tried_once():
    analyzer = ResumeAnalyzer(provider=None, models=["gpt-4o", "gpt-4o", "gpt-4o-mini"])
    assert analyzer.models == ["gpt-4o", "gpt-4o-mini"]


# ============================================
# Parsing helpers
# ============================================

def test_extract_json_object_from_prose():
    data = extract_json_object('Result: {"atsScore": 70, "keywordMatch": 50} -- done')
    assert data == {"atsScore": 70, "keywordMatch": 50}


@pytest.mark.parametrize("text", ["", "no braces here", "{not json}", None])
def test_extract_json_object_rejects_bad_replies(text):
    with pytest.raises(ValueError):
        extract_json_object(text)


def test_scores_are_clamped_and_coerced():
    result = AnalysisResult.model_validate({
        "atsScore": 140,
        "keywordMatch": "85%",
        "missingKeywords": None,
        "improvements": "Add a summary",
        "formattingIssues": 3,
        "summary": "",
    })

    assert result.ats_score == 100
    assert result.keyword_match == 85
    assert result.missing_keywords == []
    assert result.improvements == ["Add a summary"]
    assert result.formatting_issues == ["3"]
    assert result.summary == "No analysis available."


def test_feedback_uses_camel_case_keys():
    feedback = get_fallback_result().feedback()
    assert set(feedback) == {"missingKeywords", "formattingIssues", "improvements", "summary"}


def test_resume_text_is_not_serialized():
    result = get_fallback_result().model_copy(update={"resume_text": "secret resume"})
    assert "resumeText" not in result.model_dump(by_alias=True)


def test_is_quota_error_classification():
    assert is_quota_error(rate_limit_error())
    assert is_quota_error(RuntimeError("429 Too Many Requests"))
    assert not is_quota_error(auth_error())
    assert not is_quota_error(ValueError("atsScore 429 out of range"))
    assert not is_quota_error(RuntimeError("timeout"))


def test_build_prompt_respects_max_chars():
    prompt = build_prompt("abcdef", "role", max_chars=3)
    assert '"abc"' in prompt


# ============================================
# Text extraction
# ============================================

def test_extract_text_from_pdf(tmp_path):
    analyzer = ResumeAnalyzer(provider=None)

    text = analyzer.extract_text(make_pdf(tmp_path / "cv.pdf", "Jane Doe Python Engineer"))

    assert "Jane Doe Python Engineer" in text


def test_extract_text_from_empty_pdf(tmp_path):
    analyzer = ResumeAnalyzer(provider=None)
    assert analyzer.extract_text(make_pdf(tmp_path / "blank.pdf")) == EMPTY_RESUME_TEXT


def test_extract_text_from_corrupt_file(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"this is not a pdf")

    assert ResumeAnalyzer(provider=None).extract_text(str(path)) == EXTRACTION_FAILED_TEXT


def test_extract_text_from_missing_file(tmp_path):
    assert ResumeAnalyzer(provider=None).extract_text(str(tmp_path / "nope.pdf")) == EXTRACTION_FAILED_TEXT


def test_analyze_keeps_extracted_text_and_scores_it(tmp_path):
    provider = FakeProvider({m: GOOD_REPLY for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.analyze(make_pdf(tmp_path / "cv.pdf", "Kubernetes operator"), "Platform Engineer")

    assert result.ats_score == 88
    assert "Kubernetes operator" in result.resume_text
    assert "Kubernetes operator" in provider.prompts[0]


def test_analyze_corrupt_pdf_still_scores(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"garbage")
    provider = FakeProvider({m: GOOD_REPLY for m in MODELS})
    analyzer = ResumeAnalyzer(provider=provider, models=MODELS)

    result = analyzer.analyze(str(path), "role")

    assert result.resume_text == EXTRACTION_FAILED_TEXT
    assert EXTRACTION_FAILED_TEXT in provider.prompts[0]
    assert result.ats_score == 88
