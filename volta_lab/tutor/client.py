"""Gemini-backed physics tutor.

The tutor sees the same numbers the student sees (mode, voltage, current)
and answers a free-text question about them.  It is fire-and-forget with
respect to the simulation: nothing it returns flows back into the core,
and every failure becomes a fixed notice instead of an exception.

An API key must be present in the environment variable named by
:attr:`TutorSettings.api_key_env` (``GEMINI_API_KEY`` by default).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from google import genai

from volta_lab.core.controller import SimulationSnapshot
from volta_lab.core.source import Mode

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fixed texts
# ---------------------------------------------------------------------------

GREETING: str = (
    "Hi! I'm your physics lab assistant. Ask me anything about batteries, "
    "voltage, or the science behind this simulation!"
)
FALLBACK_MESSAGE: str = (
    "Sorry, something went wrong while reaching the lab database (API Error)."
)
EMPTY_REPLY_MESSAGE: str = "I couldn't come up with a reply. Please try again."

_PROMPT_TEMPLATE: str = """\
You are a physics tutor inside a web application called "Physics Life".
Please answer in {language}.

Current simulation mode: {mode_label}.
Current voltage reading: {voltage:.2f} volts.
Current current reading: {current:.2f} amps.

Explain physics concepts in plain language suitable for students.
Unless the user asks for a detailed explanation, keep answers short
(no more than 3 sentences).

User question: {question}"""


@dataclass(frozen=True)
class TutorSettings:
    """Remote tutor settings.

    Attributes:
        model: Gemini model name.
        api_key_env: Environment variable holding the API key.
        language: Language the tutor answers in.
        max_workers: Worker threads for in-flight tutor requests.
    """

    model: str = "gemini-2.5-flash"
    api_key_env: str = "GEMINI_API_KEY"
    language: str = "Simplified Chinese"
    max_workers: int = 1

    def __post_init__(self) -> None:
        """Validate tutor settings."""
        if not self.model:
            raise ValueError("model must not be empty.")
        if not self.api_key_env:
            raise ValueError("api_key_env must not be empty.")
        if not self.language:
            raise ValueError("language must not be empty.")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1.")


@dataclass(frozen=True)
class TutorContext:
    """What the tutor knows about the bench when a question is asked."""

    mode: Mode
    voltage: float
    current: float

    @classmethod
    def from_snapshot(cls, snapshot: SimulationSnapshot) -> TutorContext:
        return cls(mode=snapshot.mode, voltage=snapshot.voltage, current=snapshot.current)


class MissingApiKeyError(RuntimeError):
    """Raised when no API key is configured for the tutor."""


def build_prompt(context: TutorContext, question: str, language: str) -> str:
    """Render the single-turn prompt sent to the model."""
    return _PROMPT_TEMPLATE.format(
        language=language,
        mode_label=context.mode.label,
        voltage=context.voltage,
        current=context.current,
        question=question,
    )


class TutorClient:
    """Thin wrapper around ``google.genai.Client`` with a fixed fallback.

    Args:
        settings: Model, key variable and answer language.
        client: Pre-built client exposing ``models.generate_content``.
            When omitted, a ``genai.Client`` is created lazily on the
            first question.
    """

    def __init__(self, settings: TutorSettings | None = None, client: Any = None) -> None:
        self.settings: TutorSettings = settings or TutorSettings()
        self._client: Any = client

    def _get_client(self) -> Any:
        if self._client is None:
            api_key = os.environ.get(self.settings.api_key_env)
            if not api_key:
                raise MissingApiKeyError(
                    f"API key not found in ${self.settings.api_key_env}"
                )
            self._client = genai.Client(api_key=api_key)
        return self._client

    def ask(self, context: TutorContext, question: str) -> str:
        """Ask the tutor a question.  Never raises.

        Returns:
            The model's reply, :data:`EMPTY_REPLY_MESSAGE` for an empty
            reply, or :data:`FALLBACK_MESSAGE` on any failure.
        """
        prompt = build_prompt(context, question, self.settings.language)
        try:
            response = self._get_client().models.generate_content(
                model=self.settings.model,
                contents=prompt,
            )
        except Exception:
            logger.exception("Tutor request failed")
            return FALLBACK_MESSAGE

        text: str | None = getattr(response, "text", None)
        if not text:
            logger.warning("Tutor returned an empty reply")
            return EMPTY_REPLY_MESSAGE
        return text
