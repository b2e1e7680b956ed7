# app/adapters/repos/contracts.py
from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import (
    Contract,
    ContractRole,
    ContractSection,
    ContractSignature,
    ContractSigningToken,
)


class ContractRepository:
    """Plain queries over contracts, their sections, signatures and signing tokens."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, contract_id: str) -> Optional[Contract]:
        return await self.session.get(Contract, contract_id)

    async def list_recent(self, limit: int = 100) -> Sequence[Contract]:
        q = select(Contract).order_by(desc(Contract.created_at)).limit(limit)
        return (await self.session.execute(q)).scalars().all()

    async def sections(self, contract_id: str, role: ContractRole | None = None) -> Sequence[ContractSection]:
        q = select(ContractSection).where(ContractSection.contract_id == contract_id)
        if role is not None:
            q = q.where(ContractSection.role == role)
        q = q.order_by(ContractSection.page_number.asc(), ContractSection.created_at.asc())
        return (await self.session.execute(q)).scalars().all()

    async def section(self, contract_id: str, section_id: str) -> Optional[ContractSection]:
        q = select(ContractSection).where(
            ContractSection.id == section_id,
            ContractSection.contract_id == contract_id,
        )
        return (await self.session.execute(q)).scalars().first()

    async def signatures(self, contract_id: str) -> Sequence[ContractSignature]:
        q = (
            select(ContractSignature)
            .where(ContractSignature.contract_id == contract_id)
            .order_by(ContractSignature.signed_at.asc())
        )
        return (await self.session.execute(q)).scalars().all()

    async def signature_for(self, section_id: str, role: ContractRole) -> Optional[ContractSignature]:
        q = select(ContractSignature).where(
            ContractSignature.section_id == section_id,
            ContractSignature.signer_role == role,
        )
        return (await self.session.execute(q)).scalars().first()

    async def token(self, token: str) -> Optional[ContractSigningToken]:
        q = select(ContractSigningToken).where(ContractSigningToken.token == token)
        return (await self.session.execute(q)).scalars().first()

    def add(self, obj: object) -> None:
        self.session.add(obj)
