"""Tests for analysis schemas and the invocation envelope."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from legalyze.schemas.analysis import (
    AIResult,
    AnalysisSource,
    Analysis,
    AnalysisRunResult,
    CorruptedResult,
    FallbackResult,
    Risk,
    StoredSummary,
)


@pytest.mark.parametrize(
    "raw, expected",
    [("HIGH", "high"), (" Critical ", "critical"), ("low", "low"), ("severe", None), (None, None)],
)
def test_risk_severity_is_normalized(raw, expected):
    assert Risk(severity=raw).severity == expected


def test_non_string_severity_is_rejected():
    with pytest.raises(ValidationError):
        Risk(severity=5)


def test_null_collections_become_empty():
    analysis = Analysis.model_validate({"summary": "S", "key_points": None, "risks": None, "questions": None})

    assert analysis.key_points == []
    assert analysis.risks == []
    assert analysis.questions == []


def test_outcome_variants_carry_their_source():
    analysis = Analysis(summary="S")

    assert AIResult(analysis=analysis).source == AnalysisSource.AI
    assert FallbackResult(analysis=analysis, reason="timeout").source == AnalysisSource.FALLBACK
    assert CorruptedResult(analysis=analysis).source == AnalysisSource.CORRUPTED


def test_success_envelope_serializes_summary_and_analysis():
    summary = StoredSummary(
        id=uuid4(),
        document_id=uuid4(),
        plain_summary="S",
        key_points=["a"],
        confidence=0.9,
        created_at=datetime.now(timezone.utc),
    )
    result = AnalysisRunResult(success=True, summary=summary, analysis=Analysis(summary="S"))

    body = result.to_response()

    assert body["success"] is True
    assert body["summary"]["id"] == str(summary.id)
    assert body["analysis"] == {"summary": "S", "key_points": [], "risks": [], "questions": []}


def test_fatal_envelope_has_only_error():
    result = AnalysisRunResult(success=False, error="Document not found: x", status_code=500)

    assert result.to_response() == {"success": False, "error": "Document not found: x"}
