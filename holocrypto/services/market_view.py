"""Market cards for the market list and the `markets` envelope."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from pydantic import ValidationError

from holocrypto.schemas.envelope import MARKET_LIST_ADAPTER, MarketCoin, usable_market_rows
from holocrypto.schemas.views import ErrorView, MarketCard, MarketListView
from holocrypto.services.backend import BackendClient, TransportError, UpstreamError
from holocrypto.utils.formatting import format_number, format_percent

logger = logging.getLogger("holocrypto.market_view")


MARKETS_FAILURE = "Failed to load markets"


def build_market_card(coin: MarketCoin) -> MarketCard:
    # a missing 24h change reads as flat
    change = coin.price_change_percentage_24h or 0.0
    return MarketCard(
        id=coin.id,
        name=coin.name,
        symbol=coin.symbol.upper(),
        image=coin.image,
        price=format_number(coin.current_price, prefix="$"),
        change_24h=format_percent(change),
        change_direction="up" if change >= 0 else "down",
        sparkline=coin.sparkline,
    )


def build_market_list_view(coins: Iterable[MarketCoin]) -> MarketListView:
    return MarketListView(cards=[build_market_card(c) for c in coins])


async def load_market_list(
    backend: BackendClient,
    per_page: Optional[int] = None,
    sparkline: Optional[bool] = None,
) -> Union[MarketListView, ErrorView]:
    """The top-markets list; the provider rows are already normalized."""
    try:
        raw = await backend.markets(per_page=per_page, sparkline=sparkline)
    except UpstreamError as exc:
        return ErrorView(message=exc.detail or MARKETS_FAILURE)
    except TransportError:
        return ErrorView(message=MARKETS_FAILURE)

    try:
        coins = MARKET_LIST_ADAPTER.validate_python(usable_market_rows(raw))
    except ValidationError as exc:
        logger.warning("malformed market list | errors=%s", exc.error_count())
        return ErrorView(message=MARKETS_FAILURE)

    return build_market_list_view(coins)
