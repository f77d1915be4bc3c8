"""Single cancellable speech-capture session feeding the query router."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from holocrypto.services.intent_router import QueryIntentRouter

logger = logging.getLogger("holocrypto.voice")


ResultHandler = Callable[[Sequence[str]], Awaitable[None]]
EndHandler = Callable[[], None]


class SpeechUnavailable(RuntimeError):
    """Speech capture is missing or refused to start."""


class SpeechCapture(ABC):
    """
    Platform speech-input boundary.

    Recognition results arrive as a list of transcript alternatives, best
    first. An end event follows every session, including cancelled ones.
    Handlers can be bound only once per capture.
    """

    lang = "en-US"

    def __init__(self) -> None:
        self._on_result: Optional[ResultHandler] = None
        self._on_end: Optional[EndHandler] = None

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether capture can be started on this platform."""

    @abstractmethod
    def start(self) -> None:
        """Begin capture; raise SpeechUnavailable if it cannot start."""

    @abstractmethod
    def stop(self) -> None:
        """Request cancellation. A late result may still be delivered."""

    def bind(self, on_result: ResultHandler, on_end: EndHandler) -> None:
        if self._on_result is not None or self._on_end is not None:
            raise RuntimeError("speech capture handlers are already bound")
        self._on_result = on_result
        self._on_end = on_end

    async def emit_result(self, alternatives: Sequence[str]) -> None:
        if self._on_result is not None:
            await self._on_result(alternatives)

    def emit_end(self) -> None:
        if self._on_end is not None:
            self._on_end()


class PushSpeechCapture(SpeechCapture):
    """
    Capture whose recognition happens elsewhere (e.g. a browser running the
    Web Speech API) and whose transcripts are pushed in through `deliver`.
    """

    def __init__(self) -> None:
        super().__init__()
        self.active = False

    @property
    def is_available(self) -> bool:
        return True

    def start(self) -> None:
        self.active = True

    def stop(self) -> None:
        self.active = False

    async def deliver(self, alternatives: Sequence[str]) -> None:
        await self.emit_result(alternatives)

    def finish(self) -> None:
        self.active = False
        self.emit_end()


class VoiceState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


class VoiceSession:
    """
    IDLE -> LISTENING -> IDLE, one session per client.

    Construct once per client: handlers are bound to the capture here, and a
    capture refuses a second binding.
    """

    def __init__(self, router: QueryIntentRouter, capture: Optional[SpeechCapture] = None):
        self.router = router
        self.capture = capture
        self.state = VoiceState.IDLE
        if capture is not None:
            capture.bind(self._on_result, self._on_end)

    @property
    def available(self) -> bool:
        return self.capture is not None and self.capture.is_available

    def start(self) -> bool:
        if not self.available or self.state is VoiceState.LISTENING:
            return False

        self.router.clear()
        self.state = VoiceState.LISTENING
        try:
            self.capture.start()
        except SpeechUnavailable as exc:
            logger.info("speech capture failed to start | err=%s", exc)
            self.state = VoiceState.IDLE
            return False
        return True

    def stop(self) -> None:
        if self.state is not VoiceState.LISTENING:
            return
        self.state = VoiceState.IDLE
        self.capture.stop()

    async def _on_result(self, alternatives: Sequence[str]) -> None:
        if self.state is not VoiceState.LISTENING:
            logger.debug("late speech result ignored")
            return

        self.state = VoiceState.IDLE
        transcript = alternatives[0].strip() if alternatives else ""
        if not transcript:
            return

        self.router.query = transcript
        await self.router.ask(transcript)

    def _on_end(self) -> None:
        self.state = VoiceState.IDLE
