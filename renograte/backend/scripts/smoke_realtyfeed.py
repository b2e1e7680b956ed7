# scripts/smoke_realtyfeed.py
import argparse
import asyncio
import logging

from app.adapters.clients.realtyfeed import RealtyFeedClient
from app.domain.renovation import estimate_renovation
from app.service_layer.realtyfeed import query_feed, resolve_resource


async def main() -> None:
    parser = argparse.ArgumentParser(description="Hit RealtyFeed once with the configured credentials.")
    parser.add_argument("--resource", default=None, help="e.g. \"Property?$filter=ListPrice ge 250000.4&$top=3\"")
    parser.add_argument("--zip", default="21216")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)

    resp = await query_feed(RealtyFeedClient(), resolve_resource(args.resource, args.zip))
    rows = resp.rows()
    print("status:", resp.status_code, "rows:", len(rows))

    for p in rows[:5]:
        price = p.get("ListPrice")
        est = estimate_renovation(price) if price else None
        print(
            p.get("ListingKey"),
            p.get("City"),
            price,
            round(est.renovation_allowance) if est else None,
        )


if __name__ == "__main__":
    asyncio.run(main())
