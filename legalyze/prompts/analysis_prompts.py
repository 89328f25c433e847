"""Prompts and response schema for legal document analysis."""

ANALYSIS_SYSTEM_INSTRUCTION = (
    "You are a legal document analyst. Explain documents in plain language "
    "for non-lawyers. Report only what the document text supports."
)

ANALYSIS_PROMPT = """Analyze this legal document.

Return only valid JSON:
{{
  "summary": "plain-language summary of the document",
  "key_points": ["short key point"],
  "risks": [
    {{
      "category": "risk category",
      "severity": "low | medium | high | critical",
      "description": "what the risk is",
      "excerpt": "quoted text from the document, or null"
    }}
  ],
  "questions": ["question the reader should ask before signing"]
}}

Document text:
{document_text}
"""

# OpenAPI-style schema consumed by Gemini's response_schema.
ANALYSIS_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "key_points": {"type": "ARRAY", "items": {"type": "STRING"}},
        "risks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "category": {"type": "STRING"},
                    "severity": {
                        "type": "STRING",
                        "enum": ["low", "medium", "high", "critical"],
                    },
                    "description": {"type": "STRING"},
                    "excerpt": {"type": "STRING", "nullable": True},
                },
                "required": ["category", "severity", "description"],
            },
        },
        "questions": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["summary", "key_points", "risks", "questions"],
}


def build_analysis_prompt(document_text: str) -> str:
    return ANALYSIS_PROMPT.format(document_text=document_text)
