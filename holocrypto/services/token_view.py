"""Compose a TokenAggregate into one render-ready TokenView."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from holocrypto.schemas.envelope import TokenAggregate
from holocrypto.schemas.views import FundingInfo, FundingRoundView, FundingView, TokenView
from holocrypto.services.extractors import extract_founders, extract_funding
from holocrypto.utils.formatting import coerce_number, format_number

logger = logging.getLogger("holocrypto.token_view")


DESCRIPTION_MAX_CHARS = 320
ETHERSCAN_TOKEN_URL = "https://etherscan.io/token/{address}"

# fundamentals provider, in lookup order
FUNDAMENTALS_SOURCE_KEYS = ("messari", "fundamentals", "profile")

LINK_TEMPLATES: Dict[str, str] = {
    "twitter": "https://x.com/{handle}",
    "telegram": "https://t.me/{handle}",
    "github": "https://github.com/{handle}",
    "discord": "https://discord.gg/{handle}",
}
# accepted source keys per platform, first non-empty wins
LINK_FIELDS: Dict[str, tuple] = {
    "homepage": ("homepage",),
    "twitter": ("twitter", "twitter_screen_name"),
    "github": ("github",),
    "discord": ("discord",),
    "telegram": ("telegram", "telegram_channel_identifier"),
}


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "…"


def _non_empty_str(value: Any) -> Optional[str]:
    # homepage arrives as a list from some providers
    if isinstance(value, list):
        value = next((v for v in value if isinstance(v, str) and v.strip()), None)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def _is_host_qualified(value: str) -> bool:
    # handles never contain a dot; "t.me/foo" or "twitter.com/foo" do
    return "." in value.split("/", 1)[0]


def build_link(platform: str, value: Any) -> Optional[str]:
    """Full URL for a link field, expanding bare handles; None if empty."""
    raw = _non_empty_str(value)
    if raw is None:
        return None
    if _is_url(raw):
        return raw

    if platform == "homepage":
        return f"https://{raw}"

    template = LINK_TEMPLATES.get(platform)
    if template is None:
        return None
    if _is_host_qualified(raw):
        return f"https://{raw}"
    handle = raw.lstrip("@").strip("/")
    if not handle:
        return None
    return template.format(handle=handle)


def build_links(summary: Dict[str, Any]) -> Dict[str, str]:
    source = summary.get("links")
    if not isinstance(source, dict):
        source = {}

    links: Dict[str, str] = {}
    for platform, keys in LINK_FIELDS.items():
        candidates = [source.get(k) for k in keys] + [summary.get(k) for k in keys]
        value = next((v for v in candidates if _non_empty_str(v) is not None), None)
        url = build_link(platform, value)
        if url:
            links[platform] = url
    return links


def etherscan_url(contract_address: Any) -> Optional[str]:
    address = _non_empty_str(contract_address)
    if address is None:
        return None
    return ETHERSCAN_TOKEN_URL.format(address=address)


def fundamentals_payload(sources: Optional[Dict[str, Any]]) -> Any:
    if not sources:
        return None
    for key in FUNDAMENTALS_SOURCE_KEYS:
        if sources.get(key) is not None:
            return sources[key]
    return None


def format_price(value: Any) -> str:
    number = coerce_number(value)
    # sub-dollar tokens need more than cents to be readable
    digits = 6 if number is not None and abs(number) < 1 else 2
    return format_number(value, max_fraction_digits=digits, prefix="$")


def build_funding_view(funding: FundingInfo) -> FundingView:
    return FundingView(
        total_raised=format_number(funding.total_raised, max_fraction_digits=0, prefix="$"),
        rounds=[
            FundingRoundView(
                date=r.date,
                round=r.round,
                amount=format_number(r.amount_usd, max_fraction_digits=0, prefix="$"),
                investors=r.investors,
            )
            for r in funding.rounds
        ],
    )


def _first_key(summary: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if summary.get(key) is not None:
            return summary[key]
    return None


def _image_url(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("small") or value.get("large") or value.get("thumb")
    return _non_empty_str(value)


def build_token_view(aggregate: TokenAggregate) -> TokenView:
    summary = aggregate.summary
    payload = fundamentals_payload(aggregate.sources)
    if payload is None:
        logger.debug("no fundamentals source in aggregate | sources=%s", list((aggregate.sources or {}).keys()))

    founders = extract_founders(payload) if payload is not None else []
    funding = extract_funding(payload) if payload is not None else FundingInfo()

    description = _non_empty_str(summary.get("description"))
    if isinstance(summary.get("description"), dict):
        description = _non_empty_str(summary["description"].get("en"))

    symbol = _non_empty_str(summary.get("symbol")) or ""

    return TokenView(
        name=_non_empty_str(summary.get("name")) or "",
        symbol=symbol.upper(),
        image=_image_url(summary.get("image")),
        description=truncate(description, DESCRIPTION_MAX_CHARS) if description else "",
        contract_address=_non_empty_str(summary.get("contract_address")),
        etherscan_url=etherscan_url(summary.get("contract_address")),
        price=format_price(_first_key(summary, "price", "current_price")),
        market_cap=format_number(summary.get("market_cap"), max_fraction_digits=0, prefix="$"),
        fully_diluted_valuation=format_number(
            _first_key(summary, "fdv", "fully_diluted_valuation"), max_fraction_digits=0, prefix="$"
        ),
        circulating_supply=format_number(summary.get("circulating_supply"), max_fraction_digits=0),
        total_supply=format_number(summary.get("total_supply"), max_fraction_digits=0),
        max_supply=format_number(summary.get("max_supply"), max_fraction_digits=0),
        founders=founders,
        funding=build_funding_view(funding),
        links=build_links(summary),
    )
