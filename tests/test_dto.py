import uuid
from datetime import datetime, timezone

import pytest

from lendingdesk.dto import (
    ApproveLoanRequest,
    CreateInvestmentRequest,
    CreateLoanRequest,
    DisburseLoanRequest,
    LoanAgreementResponse,
    RejectLoanRequest,
    from_payload,
    validate,
)
from lendingdesk.errors import BadRequestError


def _valid_loan():
    return CreateLoanRequest(
        borrower_id=uuid.uuid4(),
        principal_amount=1000,
        rate=0.1,
        roi=100,
        agreement_letter_url="https://example.com/letter.pdf",
    )


def test_valid_create_loan_has_no_errors():
    assert validate(_valid_loan()) == []


def test_empty_create_loan_reports_every_field():
    errors = validate(CreateLoanRequest())
    assert len(errors) == 5
    for label in ("BorrowerID", "PrincipalAmount", "Rate", "ROI", "AgreementLetterURL"):
        assert any(message.startswith(label + " ") for message in errors)


def test_required_message():
    assert validate(RejectLoanRequest()) == ["RejectReason is a required field"]


def test_min_message():
    request = CreateInvestmentRequest(loan_id=uuid.uuid4(), amount=0.5)
    assert validate(request) == ["Amount must be 1 or greater"]


def test_url_message():
    request = _valid_loan()
    request.agreement_letter_url = "not a url"
    assert validate(request) == ["AgreementLetterURL must be a valid URL"]


def test_negative_rate_fails_minimum():
    request = _valid_loan()
    request.rate = -0.5
    errors = validate(request)
    assert len(errors) == 1
    assert errors[0].startswith("Rate ")


def test_only_first_failing_rule_is_reported_per_field():
    request = CreateInvestmentRequest(loan_id=uuid.uuid4())
    errors = validate(request)
    assert len(errors) == 1
    assert "Amount" in errors[0]
    assert "required" in errors[0]


@pytest.mark.parametrize(
    "url, ok",
    [
        ("https://example.com/a.jpg", True),
        ("file:///tmp/a.jpg", True),
        ("mailto:someone", True),
        ("example.com/a.jpg", False),
        ("http://", False),
    ],
)
def test_url_rule(url, ok):
    request = ApproveLoanRequest(
        validator_employee_id=uuid.uuid4(), visit_proof_picture_url=url
    )
    assert (validate(request) == []) is ok


def test_from_payload_parses_fields():
    loan_id = uuid.uuid4()
    request = from_payload(
        CreateInvestmentRequest, {"loan_id": str(loan_id), "amount": 250, "extra": 1}
    )
    assert request == CreateInvestmentRequest(loan_id=loan_id, amount=250.0)


def test_from_payload_missing_keys_keep_zero_values():
    request = from_payload(CreateInvestmentRequest, {"amount": None})
    assert request == CreateInvestmentRequest()
    assert len(validate(request)) == 2


def test_from_payload_parses_timestamp_with_zulu_suffix():
    officer = uuid.uuid4()
    request = from_payload(
        DisburseLoanRequest,
        {
            "signed_agreement_url": "https://example.com/signed.pdf",
            "officer_employee_id": str(officer),
            "disbursement_date": "2024-05-01T10:00:00Z",
        },
    )
    assert request.disbursement_date == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)
    assert request.officer_employee_id == officer
    assert validate(request) == []


@pytest.mark.parametrize(
    "payload",
    [
        {"loan_id": "not-a-uuid"},
        {"loan_id": 12},
        {"amount": "100"},
        {"amount": True},
    ],
)
def test_from_payload_rejects_malformed_values(payload):
    with pytest.raises(BadRequestError):
        from_payload(CreateInvestmentRequest, payload)


def test_from_payload_rejects_naive_timestamp():
    with pytest.raises(BadRequestError):
        from_payload(DisburseLoanRequest, {"disbursement_date": "2024-05-01T10:00:00"})


def test_from_payload_rejects_non_object():
    with pytest.raises(BadRequestError):
        from_payload(RejectLoanRequest, ["reason"])


def test_from_payload_rejects_response_types():
    with pytest.raises(TypeError):
        from_payload(LoanAgreementResponse, {})


def test_validate_rejects_response_types():
    response = LoanAgreementResponse(
        loan_id=uuid.uuid4(), principal_amount=1.0, interest_rate=0.1
    )
    with pytest.raises(TypeError):
        validate(response)