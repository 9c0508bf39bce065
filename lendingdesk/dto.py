"""Request and response payloads for the loan and investment endpoints."""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from urllib.parse import urlsplit

from .errors import BadRequestError

_NIL = uuid.UUID(int=0)


def _parse_uuid(value):
    if not isinstance(value, str):
        raise ValueError("expected a UUID string")
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValueError(f"invalid UUID {value!r}") from None


def _parse_float(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("expected a number")
    return float(value)


def _parse_str(value):
    if not isinstance(value, str):
        raise ValueError("expected a string")
    return value


def _parse_datetime(value):
    if not isinstance(value, str):
        raise ValueError("expected an RFC 3339 timestamp string")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"invalid timestamp {value!r}") from None
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no time zone offset")
    return parsed


def _spec(key, label, parse, default, *rules):
    return field(
        default=default,
        metadata={"json": key, "label": label, "parse": parse, "rules": rules},
    )


@dataclass
class CreateLoanRequest:
    borrower_id: uuid.UUID = _spec("borrower_id", "BorrowerID", _parse_uuid, _NIL, "required")
    principal_amount: float = _spec(
        "principal_amount", "PrincipalAmount", _parse_float, 0.0, "required", "min=1"
    )
    rate: float = _spec("rate", "Rate", _parse_float, 0.0, "required", "min=0")
    roi: float = _spec("roi", "ROI", _parse_float, 0.0, "required", "min=0")
    agreement_letter_url: str = _spec(
        "agreement_letter_url", "AgreementLetterURL", _parse_str, "", "required", "url"
    )


@dataclass
class RejectLoanRequest:
    reject_reason: str = _spec("reject_reason", "RejectReason", _parse_str, "", "required")


@dataclass
class ApproveLoanRequest:
    validator_employee_id: uuid.UUID = _spec(
        "validator_employee_id", "ValidatorEmployeeID", _parse_uuid, _NIL, "required"
    )
    visit_proof_picture_url: str = _spec(
        "visit_proof_picture_url", "VisitProofPictureURL", _parse_str, "", "required", "url"
    )


@dataclass
class DisburseLoanRequest:
    signed_agreement_url: str = _spec(
        "signed_agreement_url", "SignedAgreementURL", _parse_str, "", "required", "url"
    )
    officer_employee_id: uuid.UUID = _spec(
        "officer_employee_id", "OfficerEmployeeID", _parse_uuid, _NIL, "required"
    )
    disbursement_date: Optional[datetime] = _spec(
        "disbursement_date", "DisbursementDate", _parse_datetime, None, "required"
    )


@dataclass
class CreateInvestmentRequest:
    loan_id: uuid.UUID = _spec("loan_id", "LoanID", _parse_uuid, _NIL, "required")
    amount: float = _spec("amount", "Amount", _parse_float, 0.0, "required", "min=1")


@dataclass
class LoanAgreementResponse:
    loan_id: uuid.UUID
    principal_amount: float
    interest_rate: float
    borrower_name: str = ""


@dataclass
class InvestmentAgreementResponse:
    agreement_id: uuid.UUID
    agreement_date: Optional[datetime]
    investment_amount: float
    roi: float
    loan_id: uuid.UUID
    loan_term: int = 0
    investor_name: str = ""
    borrower_name: str = ""


def _request_fields(cls):
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError(f"{cls!r} is not a request type")
    specs = [f for f in dataclasses.fields(cls) if "json" in f.metadata]
    if not specs:
        raise TypeError(f"{cls.__name__} is not a request type")
    return specs


def from_payload(cls, payload):
    """Build request *cls* from a decoded JSON body.

    Missing or null keys keep their zero value; malformed values raise
    BadRequestError.
    """
    specs = _request_fields(cls)
    if not isinstance(payload, Mapping):
        raise BadRequestError("request body must be a JSON object")
    values = {}
    for spec in specs:
        key = spec.metadata["json"]
        raw = payload.get(key)
        if raw is None:
            continue
        try:
            values[spec.name] = spec.metadata["parse"](raw)
        except ValueError as exc:
            raise BadRequestError(f"{key}: {exc}") from None
    return cls(**values)


def _is_zero(value):
    if value is None or value == _NIL:
        return True
    if isinstance(value, str):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _is_url(value):
    if not isinstance(value, str) or not value:
        return False
    text = value.lower()
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    if text.startswith("file:/"):
        return True
    if not parts.scheme:
        return False
    opaque = not parts.netloc and parts.path and not parts.path.startswith("/")
    return bool(parts.netloc or parts.fragment or opaque)


def _check(rule, label, value):
    """Return the message for a failed *rule*, or None when it holds."""
    name, _, param = rule.partition("=")
    if name == "required":
        return f"{label} is a required field" if _is_zero(value) else None
    if name == "min":
        if isinstance(value, str):
            if len(value) < int(param):
                return f"{label} must be at least {param} characters in length"
            return None
        return f"{label} must be {param} or greater" if value < float(param) else None
    if name == "url":
        return None if _is_url(value) else f"{label} must be a valid URL"
    raise ValueError(f"unknown validation rule {rule!r}")


def validate(request):
    """Return one message per invalid field of *request*; empty when valid."""
    errors = []
    for spec in _request_fields(type(request)):
        value = getattr(request, spec.name)
        for rule in spec.metadata["rules"]:
            message = _check(rule, spec.metadata["label"], value)
            if message is not None:
                errors.append(message)
                break
    return errors