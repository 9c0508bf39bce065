"""Loan lifecycle: proposal, rejection, approval, disbursement and lookups."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from .dto import (
    ApproveLoanRequest,
    CreateLoanRequest,
    DisburseLoanRequest,
    LoanAgreementResponse,
)
from .errors import BadRequestError, NotFoundError
from .models import Loan, LoanState

_NIL = uuid.UUID(int=0)


def _missing(record):
    return record is None or record.id is None or record.id == _NIL


class LoanService:
    """Business rules for moving loans through their states."""

    def __init__(self, loans, borrowers, employees):
        self._loans = loans
        self._borrowers = borrowers
        self._employees = employees

    def _existing_loan(self, loan_id):
        loan = self._loans.get_by_id(loan_id)
        if _missing(loan):
            raise NotFoundError("loan not found")
        return loan

    def create_loan(self, request: CreateLoanRequest):
        """Propose a new loan for an existing borrower."""
        borrower = self._borrowers.get_by_id(request.borrower_id)
        if _missing(borrower):
            raise NotFoundError("borrower not found")
        loan = Loan(
            borrower_id=request.borrower_id,
            principal_amount=request.principal_amount,
            rate=request.rate,
            roi=request.roi,
            agreement_letter_url=request.agreement_letter_url,
            state=LoanState.PROPOSED,
        )
        return self._loans.create(loan)

    def reject_loan(self, loan_id, reason):
        """Reject a proposed loan, recording *reason*."""
        loan = self._existing_loan(loan_id)
        if loan.state != LoanState.PROPOSED:
            raise BadRequestError("loan is not in proposed state")
        return self._loans.update_with_map(
            loan_id, {"state": LoanState.REJECTED, "reject_reason": reason}
        )

    def approve_loan(self, loan_id, request: ApproveLoanRequest):
        """Approve a proposed loan after a field visit by a known employee."""
        loan = self._existing_loan(loan_id)
        if loan.state != LoanState.PROPOSED:
            raise BadRequestError("loan is not in proposed state")
        employee = self._employees.get_by_id(request.validator_employee_id)
        if _missing(employee):
            raise NotFoundError("validator employee not found")
        return self._loans.update_with_map(
            loan_id,
            {
                "state": LoanState.APPROVED,
                "approval_date": datetime.now(timezone.utc),
                "validator_employee_id": request.validator_employee_id,
                "visit_proof_picture_url": request.visit_proof_picture_url,
            },
        )

    def disburse_loan(self, loan_id, request: DisburseLoanRequest):
        """Mark a fully invested loan as disbursed by a known officer."""
        loan = self._existing_loan(loan_id)
        if loan.state != LoanState.INVESTED:
            raise BadRequestError("loan is not in invested state")
        employee = self._employees.get_by_id(request.officer_employee_id)
        if _missing(employee):
            raise NotFoundError("officer employee not found")
        return self._loans.update_with_map(
            loan_id,
            {
                "state": LoanState.DISBURSED,
                "disbursement_date": request.disbursement_date,
                "officer_employee_id": request.officer_employee_id,
                "signed_agreement_url": request.signed_agreement_url,
            },
        )

    def list_loans(self, state=None, page=1, limit=10):
        """One page of loans, optionally restricted to *state*."""
        filters = {}
        if state is not None:
            filters["state"] = state
        return self._loans.paginate(filters, page, limit)

    def loan_detail(self, loan_id):
        return self._existing_loan(loan_id)

    def loan_agreement(self, loan_id):
        """Agreement details for a loan that has been invested or beyond."""
        loan = self._existing_loan(loan_id)
        if loan.state in (LoanState.PROPOSED, LoanState.APPROVED):
            raise NotFoundError("loan not found")
        borrower = self._borrowers.get_by_id(loan.borrower_id)
        if _missing(borrower):
            raise NotFoundError("borrower not found")
        return LoanAgreementResponse(
            loan_id=loan.id,
            principal_amount=loan.principal_amount,
            interest_rate=loan.rate,
            borrower_name=borrower.full_name,
        )