"""Send a query to the backend and turn the response envelope into a view."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError

from holocrypto.schemas.envelope import (
    ENVELOPE_ADAPTER,
    KNOWN_KINDS,
    ErrorEnvelope,
    MarketsEnvelope,
    TokenEnvelope,
    TokenFullEnvelope,
    envelope_kind,
    normalize_envelope,
)
from holocrypto.schemas.views import AssistantView, ErrorView, TokenBasicView, TokenFullView
from holocrypto.services.backend import BackendClient, TransportError, UpstreamError
from holocrypto.services.market_view import build_market_list_view
from holocrypto.services.token_view import build_token_view, truncate

logger = logging.getLogger("holocrypto.intent_router")


GENERIC_FAILURE = "Request failed"
BASIC_DESCRIPTION_MAX_CHARS = 220
NO_DESCRIPTION = "No description available."


class RouterState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def render_envelope(body: Any) -> Optional[AssistantView]:
    """
    Classify a decoded envelope and render its one populated variant.

    Unknown or missing kinds render nothing; so does a known kind whose
    payload does not validate.
    """
    kind = envelope_kind(body)
    if kind not in KNOWN_KINDS:
        logger.debug("ignoring envelope with unrecognized kind | kind=%r", kind)
        return None

    try:
        envelope = ENVELOPE_ADAPTER.validate_python(normalize_envelope(body, kind))
    except ValidationError as exc:
        logger.warning("malformed %s envelope ignored | errors=%s", kind, exc.error_count())
        return None

    if isinstance(envelope, MarketsEnvelope):
        return build_market_list_view(envelope.data)

    if isinstance(envelope, TokenEnvelope):
        token = envelope.data
        description = (token.description.en if token.description else None) or ""
        return TokenBasicView(
            name=token.name,
            symbol=token.symbol.upper(),
            image=token.image.small if token.image else None,
            description=(
                truncate(description, BASIC_DESCRIPTION_MAX_CHARS) if description.strip() else NO_DESCRIPTION
            ),
        )

    if isinstance(envelope, TokenFullEnvelope):
        return TokenFullView(token=build_token_view(envelope.data))

    if isinstance(envelope, ErrorEnvelope):
        return ErrorView(message=envelope.message)

    return None


class QueryIntentRouter:
    """
    Per-client query state: IDLE -> SENDING -> SUCCEEDED | FAILED.

    Overlapping asks are neither serialized nor cancelled. Every ask runs to
    completion, but only the most recently issued one may publish its view;
    a response that lands after a newer ask was issued is dropped.
    """

    def __init__(self, backend: Optional[BackendClient] = None):
        self.backend = backend or BackendClient()
        self.state = RouterState.IDLE
        self.query = ""
        self.view: Optional[AssistantView] = None
        self._generation = 0
        self._in_flight = 0

    @property
    def error(self) -> Optional[str]:
        return self.view.message if isinstance(self.view, ErrorView) else None

    async def ask(self, text: Optional[str] = None) -> Optional[AssistantView]:
        """
        Submit `text` (or the current query when omitted).
        Blank input is a no-op: no request is made and state is untouched.
        """
        query = self.query if text is None else text
        if not query or not query.strip():
            return None

        self.query = query
        self._generation += 1
        generation = self._generation
        self._in_flight += 1
        self.state = RouterState.SENDING
        logger.info("ask | generation=%s | query=%r", generation, query)

        state = RouterState.SUCCEEDED
        try:
            body = await self.backend.ask(query)
            view = render_envelope(body)
            if isinstance(view, ErrorView):
                state = RouterState.FAILED
        except UpstreamError as exc:
            view = ErrorView(message=exc.detail or GENERIC_FAILURE)
            state = RouterState.FAILED
        except TransportError:
            view = ErrorView(message=GENERIC_FAILURE)
            state = RouterState.FAILED
        except Exception:
            # rendering bug; the router must still leave SENDING
            logger.exception("ask failed while rendering | generation=%s", generation)
            view = ErrorView(message=GENERIC_FAILURE)
            state = RouterState.FAILED
        finally:
            self._in_flight -= 1

        if generation != self._generation:
            logger.info("stale response dropped | generation=%s | latest=%s", generation, self._generation)
            return view

        self.view = view
        self.state = state
        return view

    def clear(self) -> None:
        """Drop the displayed view without touching query state."""
        self.view = None

    def reset(self) -> None:
        if self._in_flight:
            # a pending ask will still land; keep SENDING until it does
            self.view = None
            return
        self.state = RouterState.IDLE
        self.view = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "query": self.query,
            "view": self.view.model_dump() if self.view is not None else None,
        }
