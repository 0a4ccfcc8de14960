"""Tests for the tutor client and chat session.

A fake client stands in for ``google.genai.Client`` so that no network
access or API key is required to run the suite.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from types import SimpleNamespace
from typing import Any, Callable

import pytest

from volta_lab.core.controller import SimulationController
from volta_lab.core.source import Mode
from volta_lab.tutor.client import (
    EMPTY_REPLY_MESSAGE,
    FALLBACK_MESSAGE,
    GREETING,
    TutorClient,
    TutorContext,
    TutorSettings,
    build_prompt,
)
from volta_lab.tutor.session import TutorSession

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _FakeModels:
    def __init__(self, text: str | None = "Zinc gives up electrons.", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def generate_content(self, *, model: str, contents: str) -> SimpleNamespace:
        self.calls.append({"model": model, "contents": contents})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def _fake_client(**kwargs: Any) -> tuple[SimpleNamespace, _FakeModels]:
    models = _FakeModels(**kwargs)
    return SimpleNamespace(models=models), models


class _InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class _ManualExecutor(Executor):
    """Hands back futures the test resolves by hand."""

    def __init__(self) -> None:
        self.futures: list[Future] = []

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        self.futures.append(future)
        return future


_CONTEXT = TutorContext(mode=Mode.VOLTAIC, voltage=3.8, current=0.304)


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def test_prompt_carries_readings_and_language() -> None:
    """The prompt includes mode, 2-decimal readings, language and question."""
    prompt = build_prompt(_CONTEXT, "Why does the voltage drop?", "English")
    assert Mode.VOLTAIC.label in prompt
    assert "3.80 volts" in prompt
    assert "0.30 amps" in prompt
    assert "Please answer in English." in prompt
    assert prompt.endswith("User question: Why does the voltage drop?")


def test_context_from_snapshot() -> None:
    """TutorContext copies mode, voltage and current from a snapshot."""
    controller = SimulationController()
    controller.switch_mode(Mode.LITHIUM)
    ctx = TutorContext.from_snapshot(controller.snapshot())
    assert ctx.mode is Mode.LITHIUM
    assert ctx.voltage == pytest.approx(4.0)
    assert ctx.current == 0.0


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def test_ask_returns_model_text() -> None:
    """A successful call returns the reply and uses the configured model."""
    fake, models = _fake_client()
    client = TutorClient(TutorSettings(model="gemini-test"), client=fake)
    assert client.ask(_CONTEXT, "What is zinc doing?") == "Zinc gives up electrons."
    assert models.calls[0]["model"] == "gemini-test"
    assert "What is zinc doing?" in models.calls[0]["contents"]


def test_ask_transport_error_returns_fallback() -> None:
    """Any error becomes the fixed fallback notice."""
    fake, _ = _fake_client(error=ConnectionError("offline"))
    client = TutorClient(client=fake)
    assert client.ask(_CONTEXT, "Hello?") == FALLBACK_MESSAGE


def test_ask_empty_reply() -> None:
    """An empty reply becomes the retry notice."""
    fake, _ = _fake_client(text="")
    client = TutorClient(client=fake)
    assert client.ask(_CONTEXT, "Hello?") == EMPTY_REPLY_MESSAGE


def test_missing_api_key_returns_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without a key no client is built and the fallback is returned."""
    monkeypatch.delenv("VOLTA_LAB_TEST_KEY", raising=False)
    client = TutorClient(TutorSettings(api_key_env="VOLTA_LAB_TEST_KEY"))
    assert client.ask(_CONTEXT, "Hello?") == FALLBACK_MESSAGE


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


def test_session_starts_with_greeting() -> None:
    """A new transcript holds only the greeting."""
    fake, _ = _fake_client()
    session = TutorSession(TutorClient(client=fake), executor=_InlineExecutor())
    assert [m.text for m in session.messages] == [GREETING]
    assert session.messages[0].role == "model"
    assert not session.is_loading


def test_session_round_trip() -> None:
    """submit() records the question and poll() appends the reply."""
    fake, _ = _fake_client(text="Copper is the cathode.")
    session = TutorSession(TutorClient(client=fake), executor=_InlineExecutor())
    assert session.submit("  Which metal is the cathode?  ", _CONTEXT)
    assert session.is_loading
    assert session.poll()
    assert not session.is_loading
    roles = [m.role for m in session.messages]
    texts = [m.text for m in session.messages]
    assert roles == ["model", "user", "model"]
    assert texts[1] == "Which metal is the cathode?"
    assert texts[2] == "Copper is the cathode."


def test_session_rejects_blank_and_concurrent_questions() -> None:
    """Blank input is ignored and only one question may be in flight."""
    fake, _ = _fake_client()
    executor = _ManualExecutor()
    session = TutorSession(TutorClient(client=fake), executor=executor)
    assert not session.submit("   ", _CONTEXT)
    assert session.submit("First?", _CONTEXT)
    assert not session.submit("Second?", _CONTEXT)
    assert not session.poll()
    executor.futures[0].set_result("Answer one.")
    assert session.poll()
    assert session.messages[-1].text == "Answer one."
    assert session.submit("Second?", _CONTEXT)


def test_session_worker_failure_becomes_fallback() -> None:
    """A failed worker future is reported with the fallback notice."""
    fake, _ = _fake_client()
    executor = _ManualExecutor()
    session = TutorSession(TutorClient(client=fake), executor=executor)
    session.submit("Anything?", _CONTEXT)
    executor.futures[0].set_exception(RuntimeError("worker died"))
    assert session.poll()
    assert session.messages[-1].text == FALLBACK_MESSAGE


def test_session_wait_with_thread_pool() -> None:
    """The default thread pool answers and wait() collects the reply."""
    fake, _ = _fake_client(text="Ions carry charge.")
    session = TutorSession(TutorClient(client=fake))
    try:
        session.submit("What carries charge in brine?", _CONTEXT)
        assert session.wait(timeout=5.0)
        assert session.messages[-1].text == "Ions carry charge."
    finally:
        session.close()


def test_wait_without_pending_question() -> None:
    """wait() returns False when nothing is in flight."""
    fake, _ = _fake_client()
    session = TutorSession(TutorClient(client=fake), executor=_InlineExecutor())
    assert not session.wait(timeout=0.1)
