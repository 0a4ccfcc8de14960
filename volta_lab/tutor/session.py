"""Chat transcript for the tutor panel.

Questions are answered on a worker thread so the host's simulation clock
keeps ticking while the model thinks.  The host calls :meth:`poll` on its
own schedule to collect a finished reply.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Literal

from volta_lab.tutor.client import FALLBACK_MESSAGE, GREETING, TutorClient, TutorContext

logger = logging.getLogger(__name__)

Role = Literal["user", "model"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    text: str


class TutorSession:
    """One student's conversation with the tutor.

    At most one question is in flight; new questions are refused until the
    pending reply has been collected.

    Args:
        client: Tutor client used to answer questions.
        executor: Executor running the requests.  Defaults to a private
            thread pool sized by ``client.settings.max_workers``.
    """

    def __init__(self, client: TutorClient, executor: Executor | None = None) -> None:
        self.client: TutorClient = client
        self._owns_executor: bool = executor is None
        self._executor: Executor = executor or ThreadPoolExecutor(
            max_workers=client.settings.max_workers,
            thread_name_prefix="volta-tutor",
        )
        self._messages: list[ChatMessage] = [ChatMessage("model", GREETING)]
        self._pending: Future[str] | None = None

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def is_loading(self) -> bool:
        return self._pending is not None

    def submit(self, question: str, context: TutorContext) -> bool:
        """Post a question.

        Returns:
            ``True`` if the question was sent, ``False`` if it was blank or
            another reply is still pending.
        """
        question = question.strip()
        if not question or self._pending is not None:
            return False
        self._messages.append(ChatMessage("user", question))
        self._pending = self._executor.submit(self.client.ask, context, question)
        return True

    def poll(self) -> bool:
        """Collect a finished reply.

        Returns:
            ``True`` if a reply was appended to the transcript.
        """
        if self._pending is None or not self._pending.done():
            return False
        future, self._pending = self._pending, None
        try:
            text = future.result()
        except Exception:
            logger.exception("Tutor worker failed")
            text = FALLBACK_MESSAGE
        self._messages.append(ChatMessage("model", text))
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the pending reply is ready, then collect it."""
        if self._pending is None:
            return False
        try:
            self._pending.exception(timeout=timeout)
        except FutureTimeoutError:
            return False
        return self.poll()

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
