from __future__ import annotations

import argparse
import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db import async_session, init_models
from app.models import Contract, ContractRole
from app.service_layer.signing import SectionDraft, create_contract, generate_signing_link

DEMO_TITLE = "Demo Renovation Agreement"


def _quiet_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def _demo_contract(session: AsyncSession, document_url: str) -> str:
    # naive idempotent behavior: uniqueness on title
    existing = (await session.execute(select(Contract).where(Contract.title == DEMO_TITLE))).scalars().first()
    if existing:
        return existing.id

    detail = await create_contract(
        session,
        title=DEMO_TITLE,
        description="Seeded by scripts/seed_demo.py",
        document_url=document_url,
        created_by="seed_demo",
        sections=[
            SectionDraft(title="Buyer acknowledgement", role=ContractRole.BUYER, page_number=1),
            SectionDraft(title="Seller acknowledgement", role=ContractRole.SELLER, page_number=1),
            SectionDraft(title="Scope of work", role=ContractRole.CONTRACTOR, page_number=2),
            SectionDraft(title="Agent witness", role=ContractRole.AGENT, page_number=3, required=False),
        ],
    )
    return detail.contract.id


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--document-url", default="https://example.com/demo-contract.pdf")
    parser.add_argument("--links", action="store_true", help="Also issue one signing link per role")
    args = parser.parse_args()

    _quiet_logging()
    await init_models()

    async with async_session() as session:
        contract_id = await _demo_contract(session, args.document_url)
        links = []
        if args.links:
            for role in ContractRole:
                links.append((role, await generate_signing_link(session, contract_id=contract_id, role=role)))
        await session.commit()

    print(f"Seeded demo contract id={contract_id}")
    for role, link in links:
        print(f"  {role.value:<10} {settings.APP_URL.rstrip('/')}{link.url}  (expires {link.expires_at:%Y-%m-%d})")


if __name__ == "__main__":
    asyncio.run(main())
