"""Database records for the lending desk and the mail request message."""

from __future__ import annotations

import os
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import DateTime, Float, String, Text, TypeDecorator, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id():
    """Return a time-ordered version 7 UUID."""
    millis = time.time_ns() // 1_000_000
    value = (millis & ((1 << 48) - 1)) << 80
    value |= int.from_bytes(os.urandom(10), "big")
    value = (value & ~(0xF << 76)) | (0x7 << 76)
    value = (value & ~(0x3 << 62)) | (0x2 << 62)
    return uuid.UUID(int=value)


def _now():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value is not None else None


class LoanState(str, Enum):
    PROPOSED = "proposed"
    APPROVED = "approved"
    REJECTED = "rejected"
    INVESTED = "invested"
    DISBURSED = "disbursed"


class _StateType(TypeDecorator):
    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else LoanState(value).value

    def process_result_value(self, value, dialect):
        return None if value is None else LoanState(value)


class Base(DeclarativeBase):
    """Declarative base for all records."""


class _Entity(Base):
    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_now, nullable=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now, nullable=True
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def _payload(self):
        return {}

    def to_dict(self):
        """The record as a JSON-ready dictionary."""
        return {
            "id": str(self.id) if self.id is not None else None,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "deleted_at": _iso(self.deleted_at),
            **self._payload(),
        }


class Borrower(_Entity):
    __tablename__ = "borrowers"

    full_name: Mapped[str] = mapped_column(Text, default="")
    id_card_number: Mapped[str] = mapped_column(Text, default="")
    address: Mapped[str] = mapped_column(Text, default="")
    phone_number: Mapped[str] = mapped_column(Text, default="")
    email: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(Text, default="")

    def _payload(self):
        return {
            "full_name": self.full_name,
            "id_card_number": self.id_card_number,
            "address": self.address,
            "phone_number": self.phone_number,
            "email": self.email,
            "status": self.status,
        }


class Employee(_Entity):
    __tablename__ = "employees"

    full_name: Mapped[str] = mapped_column(Text, default="")
    email: Mapped[str] = mapped_column(Text, default="")

    def _payload(self):
        return {"full_name": self.full_name, "email": self.email}


class Investor(_Entity):
    __tablename__ = "investors"

    full_name: Mapped[str] = mapped_column(Text, default="")
    email: Mapped[str] = mapped_column(Text, default="")
    balance: Mapped[float] = mapped_column(Float, default=0.0)

    def _payload(self):
        return {"full_name": self.full_name, "email": self.email, "balance": self.balance}


class Investment(_Entity):
    __tablename__ = "investments"

    loan_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    investor_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    amount: Mapped[float] = mapped_column(Float, default=0.0)

    def _payload(self):
        return {
            "loan_id": str(self.loan_id) if self.loan_id is not None else None,
            "investor_id": str(self.investor_id) if self.investor_id is not None else None,
            "amount": self.amount,
        }


class Loan(_Entity):
    __tablename__ = "loans"

    borrower_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    principal_amount: Mapped[float] = mapped_column(Float, default=0.0)
    rate: Mapped[float] = mapped_column(Float, default=0.0)
    roi: Mapped[float] = mapped_column(Float, default=0.0)
    state: Mapped[LoanState] = mapped_column(_StateType(16), default=LoanState.PROPOSED)
    agreement_letter_url: Mapped[str] = mapped_column(Text, default="")

    validator_employee_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    visit_proof_picture_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approval_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    officer_employee_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    signed_agreement_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    disbursement_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    reject_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def _payload(self):
        state = self.state
        return {
            "borrower_id": str(self.borrower_id) if self.borrower_id is not None else None,
            "principal_amount": self.principal_amount,
            "rate": self.rate,
            "roi": self.roi,
            "state": state.value if isinstance(state, LoanState) else state,
            "agreement_letter_url": self.agreement_letter_url,
            "approval_details": {
                "validator_employee_id": self.validator_employee_id,
                "visit_proof_picture_url": self.visit_proof_picture_url,
                "approval_date": _iso(self.approval_date),
            },
            "disbursement_details": {
                "officer_employee_id": self.officer_employee_id,
                "signed_agreement_url": self.signed_agreement_url,
                "disbursement_date": _iso(self.disbursement_date),
            },
            "reject_reason": self.reject_reason,
        }


@dataclass
class MailSendRequest:
    """A request to send a templated e-mail."""

    to: str
    subject: str
    template: str = ""
    data: dict[str, Any] = field(default_factory=dict)