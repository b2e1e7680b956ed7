# app/entrypoints/api/routers/contracts.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import client_ip, require_api_key
from ....config import settings
from ....db import get_session
from ....models import Contract, ContractRole, ContractSignature
from ....schemas import (
    ContractCreate,
    ContractOut,
    ContractSummaryOut,
    RoleSignIn,
    SectionOut,
    SignatureOut,
    SigningLinkCreate,
    SigningLinkOut,
    SigningViewOut,
    SignResultOut,
    TokenInfoOut,
    TokenSignIn,
)
from ....service_layer.signing import (
    ContractDetail,
    SectionDraft,
    SignResult,
    create_contract,
    generate_signing_link,
    get_contract,
    get_signing_view,
    list_contracts,
    sign_as_role,
    sign_with_token,
)

router = APIRouter(tags=["contracts"])


def _signature_out(s: ContractSignature) -> SignatureOut:
    return SignatureOut(
        id=s.id,
        section_id=s.section_id,
        signer_name=s.signer_name,
        signer_email=s.signer_email,
        signer_role=s.signer_role.value,
        signed_at=s.signed_at,
        ip_address=s.ip_address,
    )


def _summary_fields(c: Contract) -> dict:
    return dict(
        id=c.id,
        title=c.title,
        description=c.description,
        document_url=c.document_url,
        status=c.status.value,
        created_by=c.created_by,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


def _contract_out(d: ContractDetail) -> ContractOut:
    return ContractOut(
        **_summary_fields(d.contract),
        sections=[
            SectionOut(
                id=v.section.id,
                title=v.section.title,
                description=v.section.description,
                page_number=v.section.page_number,
                role=v.section.role.value,
                required=v.section.required,
                status=v.section.status.value,
                signature=_signature_out(v.signature) if v.signature else None,
            )
            for v in d.sections
        ],
        signatures=[_signature_out(s) for s in d.signatures],
    )


def _sign_result_out(r: SignResult) -> SignResultOut:
    return SignResultOut(
        signature=_signature_out(r.signature),
        contract_status=r.contract_status.value,
        token_used=r.token_used,
    )


# ----- Contracts (API key) -----

@router.post("/contracts", response_model=ContractOut, dependencies=[Depends(require_api_key)])
async def create_contract_endpoint(
    body: ContractCreate,
    session: AsyncSession = Depends(get_session),
) -> ContractOut:
    detail = await create_contract(
        session,
        title=body.title,
        description=body.description,
        document_url=body.document_url,
        created_by=body.created_by,
        sections=[
            SectionDraft(
                title=s.title,
                description=s.description,
                page_number=s.page_number,
                role=ContractRole(s.role),
                required=s.required,
            )
            for s in body.sections
        ],
    )
    await session.commit()
    return _contract_out(detail)


@router.get("/contracts", response_model=list[ContractSummaryOut], dependencies=[Depends(require_api_key)])
async def list_contracts_endpoint(
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
) -> list[ContractSummaryOut]:
    rows = await list_contracts(session, limit=limit)
    return [ContractSummaryOut(**_summary_fields(c)) for c in rows]


@router.post("/contracts/signing-links", response_model=SigningLinkOut, dependencies=[Depends(require_api_key)])
async def create_signing_link(
    body: SigningLinkCreate,
    session: AsyncSession = Depends(get_session),
) -> SigningLinkOut:
    link = await generate_signing_link(
        session,
        contract_id=body.contract_id,
        role=ContractRole(body.role),
        email=body.email,
        name=body.name,
    )
    await session.commit()
    return SigningLinkOut(
        token=link.token,
        signing_url=link.url,
        full_url=settings.APP_URL.rstrip("/") + link.url,
        expires_at=link.expires_at,
    )


# ----- Signing link holders (no API key; the token is the credential) -----

@router.get("/contracts/token/{token}", response_model=SigningViewOut)
async def contract_by_token(token: str, session: AsyncSession = Depends(get_session)) -> SigningViewOut:
    view = await get_signing_view(session, token)
    t = view.token
    return SigningViewOut(
        token=TokenInfoOut(
            contract_id=t.contract_id,
            role=t.role.value,
            email=t.email,
            name=t.name,
            is_used=t.is_used,
            expires_at=t.expires_at,
        ),
        contract=_contract_out(view.contract),
    )


@router.post("/contracts/sign", response_model=SignResultOut)
async def sign_with_token_endpoint(
    body: TokenSignIn,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> SignResultOut:
    result = await sign_with_token(
        session,
        token=body.token,
        section_id=body.section_id,
        signature_data=body.signature_data,
        signer_name=body.signer_name,
        signer_email=body.signer_email,
        ip_address=client_ip(request),
    )
    await session.commit()
    return _sign_result_out(result)


# ----- Contract by id (API key); after the literal paths above -----

@router.get("/contracts/{contract_id}", response_model=ContractOut, dependencies=[Depends(require_api_key)])
async def get_contract_endpoint(contract_id: str, session: AsyncSession = Depends(get_session)) -> ContractOut:
    return _contract_out(await get_contract(session, contract_id))


@router.post("/contracts/{contract_id}/sign", response_model=SignResultOut, dependencies=[Depends(require_api_key)])
async def sign_as_role_endpoint(
    contract_id: str,
    body: RoleSignIn,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> SignResultOut:
    result = await sign_as_role(
        session,
        contract_id=contract_id,
        section_id=body.section_id,
        role=ContractRole(body.signer_role),
        signature_data=body.signature_data,
        signer_name=body.signer_name,
        signer_email=body.signer_email,
        ip_address=client_ip(request),
    )
    await session.commit()
    return _sign_result_out(result)
