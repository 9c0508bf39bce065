import time
import uuid

import pytest
from sqlalchemy import create_engine, select, text
from sqlalchemy.exc import StatementError
from sqlalchemy.orm import Session

from lendingdesk.models import (
    Base,
    Borrower,
    Investment,
    Investor,
    Loan,
    LoanState,
    MailSendRequest,
    new_id,
)


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as s:
        yield s


def test_new_id_is_version_7_with_current_time():
    before = time.time_ns() // 1_000_000
    value = new_id()
    after = time.time_ns() // 1_000_000
    assert value.version == 7
    assert value.variant == uuid.RFC_4122
    assert before <= value.int >> 80 <= after


def test_new_ids_are_unique():
    assert len({new_id() for _ in range(200)}) == 200


def test_rows_land_in_named_tables(session):
    borrower = Borrower(full_name="Ana", email="ana@example.com")
    session.add(borrower)
    session.commit()
    loan = Loan(borrower_id=borrower.id, state=LoanState.APPROVED)
    session.add(loan)
    session.commit()
    session.add(Investment(loan_id=loan.id, investor_id=new_id(), amount=10))
    session.commit()
    counts = {
        table: session.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()
        for table in ("borrowers", "loans", "investments")
    }
    assert counts == {"borrowers": 1, "loans": 1, "investments": 1}


def test_insert_assigns_id_and_timestamps(session):
    borrower = Borrower(full_name="Ana", email="ana@example.com")
    session.add(borrower)
    session.commit()
    assert borrower.id.version == 7
    assert borrower.created_at is not None
    assert borrower.updated_at is not None
    assert borrower.deleted_at is None


def test_loan_state_round_trip(session):
    loan = Loan(borrower_id=new_id(), principal_amount=1000, rate=0.1, roi=100,
                state="approved")
    session.add(loan)
    session.commit()
    session.expire_all()
    stored = session.scalars(select(Loan)).one()
    assert stored.state is LoanState.APPROVED
    assert stored.principal_amount == 1000


def test_loan_filter_by_state_string(session):
    session.add_all([
        Loan(borrower_id=new_id(), state=LoanState.PROPOSED),
        Loan(borrower_id=new_id(), state=LoanState.INVESTED),
    ])
    session.commit()
    found = session.scalars(select(Loan).where(Loan.state == "invested")).all()
    assert [loan.state for loan in found] == [LoanState.INVESTED]


def test_invalid_state_rejected(session):
    session.add(Loan(borrower_id=new_id(), state="bogus"))
    with pytest.raises(StatementError):
        session.commit()


@pytest.mark.parametrize(
    "value, member",
    [
        ("proposed", LoanState.PROPOSED),
        ("approved", LoanState.APPROVED),
        ("rejected", LoanState.REJECTED),
        ("invested", LoanState.INVESTED),
        ("disbursed", LoanState.DISBURSED),
    ],
)
def test_loan_state_from_value(value, member):
    assert LoanState(value) is member


def test_loan_state_unknown_value():
    with pytest.raises(ValueError):
        LoanState("bogus")


def test_loan_to_dict_nests_details(session):
    loan = Loan(borrower_id=new_id(), state=LoanState.PROPOSED,
                validator_employee_id="emp", reject_reason=None)
    session.add(loan)
    session.commit()
    data = loan.to_dict()
    assert data["id"] == str(loan.id)
    assert data["state"] == "proposed"
    assert data["approval_details"]["validator_employee_id"] == "emp"
    assert data["disbursement_details"]["signed_agreement_url"] is None


def test_investor_and_investment_to_dict(session):
    investor = Investor(full_name="Budi", email="budi@example.com", balance=5000)
    session.add(investor)
    session.commit()
    investment = Investment(loan_id=new_id(), investor_id=investor.id, amount=1000)
    session.add(investment)
    session.commit()
    assert investor.to_dict()["balance"] == 5000
    assert investment.to_dict()["investor_id"] == str(investor.id)


def test_mail_request_defaults():
    req = MailSendRequest(to="test@example.com", subject="test subject")
    assert req.data == {}
    assert req.template == ""
    other = MailSendRequest(to="test@example.com", subject="test subject")
    other.data["k"] = 1
    assert req.data == {}