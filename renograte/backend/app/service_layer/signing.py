# app/service_layer/signing.py
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.repos.contracts import ContractRepository
from ..config import settings
from ..domain.contracts import compute_contract_status, role_fully_signed
from ..domain.errors import (
    AlreadySignedError,
    ContractNotFoundError,
    InvalidTokenError,
    MissingParameterError,
    RoleMismatchError,
    SectionNotFoundError,
    TokenExpiredError,
)
from ..models import (
    Contract,
    ContractRole,
    ContractSection,
    ContractSignature,
    ContractSigningToken,
    ContractStatus,
    SectionStatus,
)

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_aware_utc(dt: datetime) -> datetime:
    """SQLite hands datetimes back naive; they were stored as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# -----------------------------
# Views
# -----------------------------
@dataclass
class SectionDraft:
    title: str
    role: ContractRole
    page_number: int = 1
    description: Optional[str] = None
    required: bool = True


@dataclass
class SectionView:
    section: ContractSection
    signature: Optional[ContractSignature] = None


@dataclass
class ContractDetail:
    contract: Contract
    sections: list[SectionView] = field(default_factory=list)
    signatures: list[ContractSignature] = field(default_factory=list)


@dataclass(frozen=True)
class SigningLink:
    token: str
    url: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenInfo:
    contract_id: str
    role: ContractRole
    email: Optional[str]
    name: Optional[str]
    is_used: bool
    expires_at: datetime


@dataclass
class SigningView:
    token: TokenInfo
    contract: ContractDetail


@dataclass(frozen=True)
class SignResult:
    signature: ContractSignature
    contract_status: ContractStatus
    token_used: bool = False


# -----------------------------
# Contract CRUD
# -----------------------------
async def create_contract(
    session: AsyncSession,
    *,
    title: str,
    document_url: str,
    description: Optional[str] = None,
    created_by: str = "unknown",
    sections: Iterable[SectionDraft] = (),
) -> ContractDetail:
    if not title or not title.strip():
        raise MissingParameterError("title is required")
    if not document_url or not document_url.strip():
        raise MissingParameterError("document_url is required")

    repo = ContractRepository(session)
    now = _utcnow()
    contract = Contract(
        title=title.strip(),
        description=description,
        document_url=document_url.strip(),
        status=ContractStatus.PENDING,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    repo.add(contract)
    await session.flush()

    views: list[SectionView] = []
    for d in sections:
        s = ContractSection(
            contract_id=contract.id,
            title=d.title,
            description=d.description,
            page_number=int(d.page_number),
            role=ContractRole(d.role),
            required=bool(d.required),
            status=SectionStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        repo.add(s)
        views.append(SectionView(section=s))
    await session.flush()

    views.sort(key=lambda v: v.section.page_number)
    log.info("contract created id=%s sections=%d", contract.id, len(views))
    return ContractDetail(contract=contract, sections=views)


async def list_contracts(session: AsyncSession, *, limit: int = 100) -> list[Contract]:
    return list(await ContractRepository(session).list_recent(limit))


async def _detail(repo: ContractRepository, contract: Contract, role: ContractRole | None = None) -> ContractDetail:
    sections = await repo.sections(contract.id, role)
    signatures = list(await repo.signatures(contract.id))
    by_section = {(sig.section_id, sig.signer_role): sig for sig in signatures}
    views = [SectionView(section=s, signature=by_section.get((s.id, s.role))) for s in sections]
    if role is not None:
        signatures = [sig for sig in signatures if sig.signer_role == role]
    return ContractDetail(contract=contract, sections=views, signatures=signatures)


async def get_contract(session: AsyncSession, contract_id: str) -> ContractDetail:
    repo = ContractRepository(session)
    contract = await repo.get(contract_id)
    if contract is None:
        raise ContractNotFoundError()
    return await _detail(repo, contract)


# -----------------------------
# Signing tokens
# -----------------------------
async def generate_signing_link(
    session: AsyncSession,
    *,
    contract_id: str,
    role: ContractRole,
    email: Optional[str] = None,
    name: Optional[str] = None,
    ttl_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> SigningLink:
    repo = ContractRepository(session)
    if await repo.get(contract_id) is None:
        raise ContractNotFoundError()

    now = now or _utcnow()
    days = settings.SIGNING_TOKEN_TTL_DAYS if ttl_days is None else ttl_days
    row = ContractSigningToken(
        token=secrets.token_urlsafe(32),
        contract_id=contract_id,
        role=ContractRole(role),
        email=email,
        name=name,
        expires_at=now + timedelta(days=days),
        is_used=False,
        created_at=now,
    )
    repo.add(row)
    await session.flush()

    log.info("signing link issued contract=%s role=%s", contract_id, row.role.value)
    return SigningLink(token=row.token, url=f"/sign/{row.token}", expires_at=row.expires_at)


async def _resolve_token(
    repo: ContractRepository, token: str, now: Optional[datetime] = None
) -> ContractSigningToken:
    if not token:
        raise InvalidTokenError()
    row = await repo.token(token)
    if row is None:
        raise InvalidTokenError()
    if (now or _utcnow()) > _ensure_aware_utc(row.expires_at):
        raise TokenExpiredError()
    return row


def _token_info(row: ContractSigningToken) -> TokenInfo:
    return TokenInfo(
        contract_id=row.contract_id,
        role=row.role,
        email=row.email,
        name=row.name,
        is_used=bool(row.is_used),
        expires_at=_ensure_aware_utc(row.expires_at),
    )


async def get_contract_by_signing_token(
    session: AsyncSession, token: str, *, now: Optional[datetime] = None
) -> TokenInfo:
    """Resolve a token without consuming it."""
    row = await _resolve_token(ContractRepository(session), token, now)
    return _token_info(row)


async def get_signing_view(session: AsyncSession, token: str, *, now: Optional[datetime] = None) -> SigningView:
    """The contract as the token holder sees it: only their role's sections."""
    repo = ContractRepository(session)
    row = await _resolve_token(repo, token, now)
    contract = await repo.get(row.contract_id)
    if contract is None:
        raise ContractNotFoundError()
    return SigningView(token=_token_info(row), contract=await _detail(repo, contract, row.role))


# -----------------------------
# Signing
# -----------------------------
async def _section_for_role(
    repo: ContractRepository, contract_id: str, section_id: str, role: ContractRole
) -> ContractSection:
    section = await repo.section(contract_id, section_id)
    if section is None:
        raise SectionNotFoundError()
    if section.role != role:
        raise RoleMismatchError()
    if await repo.signature_for(section.id, role) is not None:
        raise AlreadySignedError()
    return section


async def _apply_signature(
    repo: ContractRepository,
    section: ContractSection,
    *,
    role: ContractRole,
    signature_data: str,
    signer_name: str,
    signer_email: str,
    ip_address: Optional[str],
    now: datetime,
) -> tuple[ContractSignature, ContractStatus]:
    if not signature_data:
        raise MissingParameterError("signature_data is required")

    sig = ContractSignature(
        contract_id=section.contract_id,
        section_id=section.id,
        signature_data=signature_data,
        signer_name=signer_name,
        signer_email=signer_email,
        signer_role=role,
        signed_at=now,
        ip_address=ip_address,
    )
    repo.add(sig)
    try:
        await repo.session.flush()
    except IntegrityError as e:
        # a concurrent request got the (section, role) row in first
        raise AlreadySignedError() from e

    section.status = SectionStatus.SIGNED
    section.updated_at = now

    contract = await repo.get(section.contract_id)
    if contract is None:
        raise ContractNotFoundError()
    status = compute_contract_status(await repo.sections(contract.id))
    contract.status = status
    contract.updated_at = now
    await repo.session.flush()
    return sig, status


async def sign_with_token(
    session: AsyncSession,
    *,
    token: str,
    section_id: str,
    signature_data: str,
    signer_name: str,
    signer_email: str,
    ip_address: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SignResult:
    """
    Sign one section with a signing link. The link is consumed once every
    section of its role on the contract carries a signature.
    """
    now = now or _utcnow()
    repo = ContractRepository(session)

    row = await _resolve_token(repo, token, now)
    section = await _section_for_role(repo, row.contract_id, section_id, row.role)
    if row.is_used:
        raise InvalidTokenError("This signing link has already been used")

    sig, status = await _apply_signature(
        repo,
        section,
        role=row.role,
        signature_data=signature_data,
        signer_name=signer_name,
        signer_email=signer_email,
        ip_address=ip_address,
        now=now,
    )

    if role_fully_signed(await repo.sections(row.contract_id, row.role), row.role):
        row.is_used = True
        await session.flush()

    log.info(
        "section signed contract=%s section=%s role=%s status=%s",
        row.contract_id, section.id, row.role.value, status.value,
    )
    return SignResult(signature=sig, contract_status=status, token_used=bool(row.is_used))


async def sign_as_role(
    session: AsyncSession,
    *,
    contract_id: str,
    section_id: str,
    role: ContractRole,
    signature_data: str,
    signer_name: str,
    signer_email: str,
    ip_address: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SignResult:
    """Sign on behalf of a role without a link (API-key callers)."""
    now = now or _utcnow()
    repo = ContractRepository(session)
    if await repo.get(contract_id) is None:
        raise ContractNotFoundError()

    role = ContractRole(role)
    section = await _section_for_role(repo, contract_id, section_id, role)
    sig, status = await _apply_signature(
        repo,
        section,
        role=role,
        signature_data=signature_data,
        signer_name=signer_name,
        signer_email=signer_email,
        ip_address=ip_address,
        now=now,
    )
    log.info("section signed contract=%s section=%s role=%s status=%s", contract_id, section.id, role.value, status.value)
    return SignResult(signature=sig, contract_status=status)
