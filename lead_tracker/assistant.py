"""LLM helpers for drafting outreach emails and summarising how to approach a lead."""
from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from .models import Lead

LOGGER = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

TextGenerator = Callable[[str], str]


def lead_prompt_context(lead: Lead) -> str:
    """Render the lead's imported columns as ``key: value`` lines."""

    return "\n".join(f"{key}: {value}" for key, value in lead.display_fields().items())


def build_cold_email_prompt(lead: Lead) -> str:
    return (
        "You are an expert sales representative. Write a personalized cold outreach email for the following lead.\n"
        "Keep it professional, concise, and persuasive. Focus on starting a conversation.\n\n"
        "Lead Details:\n"
        f"{lead_prompt_context(lead)}\n\n"
        "Subject: [Generate a catchy subject line]\n"
        "Body: [Generate the email body]\n"
    )


def build_analysis_prompt(lead: Lead) -> str:
    return (
        "Analyze this lead and provide 3 brief bullet points on how to best approach them "
        "based on their industry, role, or company.\n"
        "Lead Data:\n"
        f"{lead_prompt_context(lead)}\n"
    )


class GeminiGenerator:
    """Text generator backed by the Google Gen AI SDK."""

    def __init__(self, model: str = DEFAULT_GEMINI_MODEL, api_key: Optional[str] = None) -> None:
        try:
            from google import genai  # type: ignore[import-untyped]
        except ImportError as exc:
            raise ImportError(
                "google-genai package is required for GeminiGenerator. "
                "Install it with: pip install google-genai"
            ) from exc

        resolved_key = api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY", "")
        self._client = genai.Client(api_key=resolved_key)
        self._model = model

    def __call__(self, prompt: str) -> str:
        response = self._client.models.generate_content(model=self._model, contents=prompt)
        return response.text or ""


class LeadAssistant:
    """Wraps a text generator with lead-specific prompts.

    Generator failures are logged and turned into a short message so callers
    can show the outcome without handling provider errors.
    """

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    def draft_cold_email(self, lead: Lead) -> str:
        return self._run(build_cold_email_prompt(lead), "Failed to generate email.", "Error generating email. Please try again.")

    def analyze(self, lead: Lead) -> str:
        return self._run(build_analysis_prompt(lead), "No analysis available.", "Error analyzing lead.")

    def _run(self, prompt: str, empty_message: str, error_message: str) -> str:
        try:
            text = self._generator(prompt)
        except Exception:
            LOGGER.exception("Text generation failed")
            return error_message
        return (text or "").strip() or empty_message


__all__ = [
    "DEFAULT_GEMINI_MODEL",
    "GeminiGenerator",
    "LeadAssistant",
    "TextGenerator",
    "build_analysis_prompt",
    "build_cold_email_prompt",
    "lead_prompt_context",
]
