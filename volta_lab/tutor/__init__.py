"""Remote physics tutor for the Volta Lab dashboard."""

from volta_lab.tutor.client import (
    EMPTY_REPLY_MESSAGE,
    FALLBACK_MESSAGE,
    GREETING,
    MissingApiKeyError,
    TutorClient,
    TutorContext,
    TutorSettings,
    build_prompt,
)
from volta_lab.tutor.session import ChatMessage, TutorSession

__all__ = [
    "ChatMessage",
    "EMPTY_REPLY_MESSAGE",
    "FALLBACK_MESSAGE",
    "GREETING",
    "MissingApiKeyError",
    "TutorClient",
    "TutorContext",
    "TutorSession",
    "TutorSettings",
    "build_prompt",
]
