from __future__ import annotations

from typing import Optional

from holocrypto.services.backend import BackendClient
from holocrypto.services.intent_router import QueryIntentRouter
from holocrypto.services.voice import SpeechCapture, VoiceSession


class AssistantClient:
    """Everything one client owns: its router and its single voice session."""

    def __init__(self, backend: Optional[BackendClient] = None, capture: Optional[SpeechCapture] = None):
        self.backend = backend or BackendClient()
        self.router = QueryIntentRouter(self.backend)
        self.voice = VoiceSession(self.router, capture)

    def snapshot(self) -> dict:
        return {
            **self.router.snapshot(),
            "voice": {"state": self.voice.state.value, "available": self.voice.available},
        }
