# holocrypto/scripts/ask.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from holocrypto.config.settings import get_settings
from holocrypto.schemas.views import ErrorView
from holocrypto.services.backend import BackendClient
from holocrypto.services.intent_router import QueryIntentRouter, RouterState
from holocrypto.services.market_view import load_market_list


async def run_query(query: str, backend: BackendClient) -> tuple[int, Dict[str, Any]]:
    router = QueryIntentRouter(backend)
    await router.ask(query)
    code = 1 if router.state is RouterState.FAILED else 0
    return code, router.snapshot()


async def run_markets(backend: BackendClient, per_page: Optional[int]) -> tuple[int, Dict[str, Any]]:
    view = await load_market_list(backend, per_page=per_page)
    return (1 if isinstance(view, ErrorView) else 0), view.model_dump()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Ask the crypto assistant from a terminal")
    parser.add_argument("query", nargs="*", help='e.g. "price of bitcoin" or a contract address')
    parser.add_argument("--markets", action="store_true", help="show the top-markets list instead")
    parser.add_argument("--per-page", type=int, default=None)
    parser.add_argument("--backend-url", default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )

    backend = BackendClient(base_url=args.backend_url)
    query = " ".join(args.query)

    if args.markets:
        code, payload = asyncio.run(run_markets(backend, args.per_page))
    elif query.strip():
        code, payload = asyncio.run(run_query(query, backend))
    else:
        parser.error("a query is required unless --markets is given")

    print(json.dumps(payload, ensure_ascii=False))
    raise SystemExit(code)


if __name__ == "__main__":
    main()
