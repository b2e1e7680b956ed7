# app/domain/contracts.py
from __future__ import annotations

from typing import Iterable, Protocol

from ..models import ContractRole, ContractStatus, SectionStatus


class _SectionLike(Protocol):
    required: bool
    status: SectionStatus
    role: ContractRole


def compute_contract_status(sections: Iterable[_SectionLike]) -> ContractStatus:
    """
    PENDING until something is signed, IN_PROGRESS while any required section is
    open, FULLY_EXECUTED once every required section is signed.
    """
    sections = list(sections)
    if not any(s.status == SectionStatus.SIGNED for s in sections):
        return ContractStatus.PENDING
    required = [s for s in sections if s.required]
    if all(s.status == SectionStatus.SIGNED for s in required):
        return ContractStatus.FULLY_EXECUTED
    return ContractStatus.IN_PROGRESS


def role_fully_signed(sections: Iterable[_SectionLike], role: ContractRole) -> bool:
    mine = [s for s in sections if s.role == role]
    return bool(mine) and all(s.status == SectionStatus.SIGNED for s in mine)
