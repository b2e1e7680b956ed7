# app/models.py
from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------
# Core enums
# -----------------------------
class ContractRole(str, enum.Enum):
    BUYER = "BUYER"
    SELLER = "SELLER"
    CONTRACTOR = "CONTRACTOR"
    AGENT = "AGENT"


class ContractStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    FULLY_EXECUTED = "FULLY_EXECUTED"


class SectionStatus(str, enum.Enum):
    PENDING = "PENDING"
    SIGNED = "SIGNED"


# -----------------------------
# Models
# -----------------------------
class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)

    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_url: Mapped[str] = mapped_column(String(1024))

    status: Mapped[ContractStatus] = mapped_column(
        Enum(ContractStatus), default=ContractStatus.PENDING, index=True
    )
    created_by: Mapped[str] = mapped_column(String(120), default="unknown")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class ContractSection(Base):
    __tablename__ = "contract_sections"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    contract_id: Mapped[str] = mapped_column(String(32), ForeignKey("contracts.id"), index=True)

    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    page_number: Mapped[int] = mapped_column(Integer, default=1)

    role: Mapped[ContractRole] = mapped_column(Enum(ContractRole), index=True)
    required: Mapped[bool] = mapped_column(Boolean, default=True)
    status: Mapped[SectionStatus] = mapped_column(Enum(SectionStatus), default=SectionStatus.PENDING)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class ContractSignature(Base):
    __tablename__ = "contract_signatures"
    __table_args__ = (
        UniqueConstraint("section_id", "signer_role", name="uq_signature_section_role"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    contract_id: Mapped[str] = mapped_column(String(32), ForeignKey("contracts.id"), index=True)
    section_id: Mapped[str] = mapped_column(String(32), ForeignKey("contract_sections.id"), index=True)

    # data-URL of the drawn signature image
    signature_data: Mapped[str] = mapped_column(Text)
    signer_name: Mapped[str] = mapped_column(String(255))
    signer_email: Mapped[str] = mapped_column(String(255))
    signer_role: Mapped[ContractRole] = mapped_column(Enum(ContractRole))

    signed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)


class ContractSigningToken(Base):
    __tablename__ = "contract_signing_tokens"
    __table_args__ = (UniqueConstraint("token", name="uq_signing_token"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    token: Mapped[str] = mapped_column(String(128), index=True)
    contract_id: Mapped[str] = mapped_column(String(32), ForeignKey("contracts.id"), index=True)

    role: Mapped[ContractRole] = mapped_column(Enum(ContractRole))
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    is_used: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
