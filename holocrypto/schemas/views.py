"""Render-ready view models returned to callers."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class FundingRound(BaseModel):
    date: Optional[str] = None
    round: Optional[str] = None
    amount_usd: Optional[float] = None
    investors: Optional[int] = None


class FundingInfo(BaseModel):
    """Total raised plus at most five rounds, in source order."""

    total_raised: Optional[float] = None
    rounds: List[FundingRound] = Field(default_factory=list)


class FundingRoundView(BaseModel):
    date: Optional[str] = None
    round: Optional[str] = None
    amount: str
    investors: Optional[int] = None


class FundingView(BaseModel):
    total_raised: str
    rounds: List[FundingRoundView] = Field(default_factory=list)


class TokenView(BaseModel):
    name: str
    symbol: str
    image: Optional[str] = None
    description: str
    contract_address: Optional[str] = None
    etherscan_url: Optional[str] = None
    price: str
    market_cap: str
    fully_diluted_valuation: str
    circulating_supply: str
    total_supply: str
    max_supply: str
    founders: List[str] = Field(default_factory=list)
    funding: FundingView
    # only platforms that resolved to a usable URL appear here
    links: Dict[str, str] = Field(default_factory=dict)


class MarketCard(BaseModel):
    id: str
    name: str
    symbol: str
    image: Optional[str] = None
    price: str
    change_24h: str
    change_direction: Literal["up", "down"]
    sparkline: List[float] = Field(default_factory=list)


class MarketListView(BaseModel):
    kind: Literal["markets"] = "markets"
    cards: List[MarketCard] = Field(default_factory=list)


class TokenBasicView(BaseModel):
    kind: Literal["token"] = "token"
    name: str
    symbol: str
    image: Optional[str] = None
    description: str


class TokenFullView(BaseModel):
    kind: Literal["token_full"] = "token_full"
    token: TokenView


class ErrorView(BaseModel):
    kind: Literal["error"] = "error"
    message: str


AssistantView = Union[MarketListView, TokenBasicView, TokenFullView, ErrorView]
