from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Literal

Role = Literal["BUYER", "SELLER", "CONTRACTOR", "AGENT"]


# ----- Estimates -----

class RenovationEstimateOut(BaseModel):
    list_price: float
    renovation_allowance: float
    after_renovation_value: float
    tier_percentage: float
    tier_cap: float


class ListingEstimateOut(RenovationEstimateOut):
    listing_key: str
    standard_status: str | None = None
    address: str | None = None


class AddressEstimateIn(BaseModel):
    address: str = Field(..., min_length=1)


class ComparableOut(BaseModel):
    listing_key: str | None = None
    address: str
    list_price: float | None = None
    living_area: float | None = None
    bedrooms: float | None = None
    bathrooms: float | None = None
    year_built: Any = None
    property_type: str | None = None


class AddressEstimateOut(BaseModel):
    property_address: str
    arv: int
    chv: int
    renovation_allowance: int
    calculation_method: Literal["mls_data", "fallback_calculation"]
    arv_formula: str
    chv_formula: str
    renovation_formula: str
    property_details: dict[str, Any]
    renovated_comps: list[ComparableOut] = []
    as_is_comps: list[ComparableOut] = []
    latitude: float | None = None
    longitude: float | None = None


# ----- Contracts -----

class SectionIn(BaseModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    page_number: int = Field(1, ge=1)
    role: Role
    required: bool = True


class ContractCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    document_url: str = Field(..., min_length=1)
    created_by: str = "unknown"
    sections: list[SectionIn] = []


class SignatureOut(BaseModel):
    id: str
    section_id: str
    signer_name: str
    signer_email: str
    signer_role: str
    signed_at: datetime
    ip_address: str | None = None


class SectionOut(BaseModel):
    id: str
    title: str
    description: str | None = None
    page_number: int
    role: str
    required: bool
    status: str
    signature: SignatureOut | None = None


class ContractSummaryOut(BaseModel):
    id: str
    title: str
    description: str | None = None
    document_url: str
    status: str
    created_by: str
    created_at: datetime
    updated_at: datetime


class ContractOut(ContractSummaryOut):
    sections: list[SectionOut] = []
    signatures: list[SignatureOut] = []


class SigningLinkCreate(BaseModel):
    contract_id: str
    role: Role
    email: str | None = None
    name: str | None = None


class SigningLinkOut(BaseModel):
    token: str
    signing_url: str
    full_url: str
    expires_at: datetime


class TokenInfoOut(BaseModel):
    contract_id: str
    role: str
    email: str | None = None
    name: str | None = None
    is_used: bool
    expires_at: datetime


class SigningViewOut(BaseModel):
    token: TokenInfoOut
    contract: ContractOut


class TokenSignIn(BaseModel):
    token: str = Field(..., min_length=1)
    section_id: str
    signature_data: str = Field(..., min_length=1)
    signer_name: str
    signer_email: str


class RoleSignIn(BaseModel):
    section_id: str
    signature_data: str = Field(..., min_length=1)
    signer_name: str
    signer_email: str
    signer_role: Role


class SignResultOut(BaseModel):
    success: bool = True
    signature: SignatureOut
    contract_status: str
    token_used: bool = False
