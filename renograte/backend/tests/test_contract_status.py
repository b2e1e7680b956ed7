from types import SimpleNamespace

from app.domain.contracts import compute_contract_status, role_fully_signed
from app.models import ContractRole, ContractStatus, SectionStatus


def _s(role, status=SectionStatus.PENDING, required=True):
    return SimpleNamespace(role=role, status=status, required=required)


def test_two_required_sections():
    a = _s(ContractRole.BUYER)
    b = _s(ContractRole.SELLER)
    assert compute_contract_status([a, b]) == ContractStatus.PENDING

    a.status = SectionStatus.SIGNED
    assert compute_contract_status([a, b]) == ContractStatus.IN_PROGRESS

    b.status = SectionStatus.SIGNED
    assert compute_contract_status([a, b]) == ContractStatus.FULLY_EXECUTED


def test_optional_sections_do_not_block_execution():
    sections = [
        _s(ContractRole.BUYER, SectionStatus.SIGNED),
        _s(ContractRole.AGENT, required=False),
    ]
    assert compute_contract_status(sections) == ContractStatus.FULLY_EXECUTED


def test_signed_optional_only_is_in_progress():
    sections = [_s(ContractRole.BUYER), _s(ContractRole.AGENT, SectionStatus.SIGNED, required=False)]
    assert compute_contract_status(sections) == ContractStatus.IN_PROGRESS


def test_no_sections_is_pending():
    assert compute_contract_status([]) == ContractStatus.PENDING


def test_role_fully_signed():
    sections = [
        _s(ContractRole.BUYER, SectionStatus.SIGNED),
        _s(ContractRole.BUYER),
        _s(ContractRole.SELLER, SectionStatus.SIGNED),
    ]
    assert role_fully_signed(sections, ContractRole.SELLER) is True
    assert role_fully_signed(sections, ContractRole.BUYER) is False
    assert role_fully_signed(sections, ContractRole.AGENT) is False
