"""Pydantic models for the /api/ask response envelope and the market list."""

from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from holocrypto.utils.formatting import coerce_number

logger = logging.getLogger("holocrypto.schemas")


def _has_coin_id(row: Any) -> bool:
    return isinstance(row, dict) and isinstance(row.get("id"), str) and bool(row["id"].strip())


def usable_market_rows(value: Any) -> Any:
    """
    Drop rows that cannot become a card (not an object, or no `id`).
    Non-list input is returned unchanged so validation still rejects it.
    """
    if not isinstance(value, list):
        return value
    rows = [row for row in value if _has_coin_id(row)]
    if len(rows) != len(value):
        logger.warning("market rows skipped | skipped=%s | kept=%s", len(value) - len(rows), len(rows))
    return rows


class MarketCoin(BaseModel):
    """One row of the provider market list; display fields degrade to missing."""

    id: str
    name: str = ""
    symbol: str = ""
    image: Optional[str] = None
    current_price: Optional[float] = None
    price_change_percentage_24h: Optional[float] = None
    sparkline_in_7d: Optional[Dict[str, Any]] = None

    @field_validator("name", "symbol", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return value if isinstance(value, str) else ""

    @field_validator("image", mode="before")
    @classmethod
    def coerce_image(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @field_validator("current_price", "price_change_percentage_24h", mode="before")
    @classmethod
    def coerce_numbers(cls, value: Any) -> Any:
        return coerce_number(value)

    @field_validator("sparkline_in_7d", mode="before")
    @classmethod
    def coerce_sparkline(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @property
    def sparkline(self) -> List[float]:
        prices = (self.sparkline_in_7d or {}).get("price")
        if not isinstance(prices, list):
            return []
        points = (coerce_number(p) for p in prices if not isinstance(p, str))
        return [p for p in points if p is not None]


class TokenImage(BaseModel):
    small: Optional[str] = None


class TokenDescription(BaseModel):
    en: Optional[str] = None


class TokenBasic(BaseModel):
    """Identity plus short description for a single coin."""

    name: str = ""
    symbol: str = ""
    image: Optional[TokenImage] = None
    description: Optional[TokenDescription] = None

    @field_validator("image", mode="before")
    @classmethod
    def coerce_image(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"small": value}
        return value

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"en": value}
        return value


class TokenAggregate(BaseModel):
    """
    Primary summary plus raw per-provider payloads.

    `sources` values are deliberately untyped: provider schemas are unstable
    and are only ever read through the extractors.
    """

    summary: Dict[str, Any] = Field(default_factory=dict)
    sources: Optional[Dict[str, Any]] = None

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("sources", mode="before")
    @classmethod
    def coerce_sources(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


# ---------- Envelope variants ----------


class MarketsEnvelope(BaseModel):
    kind: Literal["markets"]
    data: List[MarketCoin] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def drop_unusable_rows(cls, value: Any) -> Any:
        return usable_market_rows(value)


class TokenEnvelope(BaseModel):
    kind: Literal["token"]
    data: TokenBasic


class TokenFullEnvelope(BaseModel):
    kind: Literal["token_full"]
    data: TokenAggregate


class ErrorEnvelope(BaseModel):
    kind: Literal["error"]
    message: str = "Request failed"


Envelope = Annotated[
    Union[MarketsEnvelope, TokenEnvelope, TokenFullEnvelope, ErrorEnvelope],
    Field(discriminator="kind"),
]

ENVELOPE_ADAPTER: TypeAdapter[Any] = TypeAdapter(Envelope)

KNOWN_KINDS = frozenset({"markets", "token", "token_full", "error"})

MARKET_LIST_ADAPTER: TypeAdapter[List[MarketCoin]] = TypeAdapter(List[MarketCoin])


def envelope_kind(body: Any) -> Optional[str]:
    """
    Read the discriminator: `kind`, falling back to the legacy `type` field.
    A body carrying a top-level `error` string is an error envelope.
    """
    if not isinstance(body, dict):
        return None
    kind = body.get("kind") or body.get("type")
    if kind is None and isinstance(body.get("error"), str):
        return "error"
    return kind if isinstance(kind, str) else None


def normalize_envelope(body: Dict[str, Any], kind: str) -> Dict[str, Any]:
    out = dict(body)
    out["kind"] = kind
    out.pop("type", None)
    if kind == "error" and "message" not in out and isinstance(body.get("error"), str):
        out["message"] = body["error"]
    return out
