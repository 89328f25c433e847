"""Document analysis pipeline: extraction, AI analysis, fallback and persistence."""

from legalyze.services.analysis.orchestrator import DocumentAnalysisOrchestrator

__all__ = ["DocumentAnalysisOrchestrator"]
