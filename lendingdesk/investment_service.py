"""Investments in approved loans and the agreements that record them."""

from __future__ import annotations

import uuid
from datetime import datetime

from .dto import CreateInvestmentRequest, InvestmentAgreementResponse
from .errors import BadRequestError, NotFoundError
from .mail_service import MAIL_SEND_TOPIC
from .models import Investment, LoanState, MailSendRequest

_NIL = uuid.UUID(int=0)


def _missing(record):
    return record is None or record.id is None or record.id == _NIL


class InvestmentService:
    """Business rules for placing money from investors into loans."""

    def __init__(self, investments, investors, loans, borrowers, mail_bus, app_url=""):
        self._investments = investments
        self._investors = investors
        self._loans = loans
        self._borrowers = borrowers
        self._bus = mail_bus
        self._app_url = app_url

    def add_investment(self, investor_id, request: CreateInvestmentRequest):
        """Invest *request.amount* from *investor_id* into an approved loan.

        Everything happens in one transaction that is rolled back when any
        rule fails. The investor is mailed a confirmation; once the loan is
        fully funded it moves to the invested state and the borrower is told.
        """
        with self._investments.transaction() as tx:
            loan = self._loans.get_by_id_for_update(request.loan_id, tx)
            if _missing(loan):
                raise NotFoundError("loan not found")
            if loan.state != LoanState.APPROVED:
                raise BadRequestError("loan is not in approved")

            investor = self._investors.get_by_id_for_update(investor_id, tx)
            if _missing(investor):
                raise NotFoundError("investor not found")
            if investor.balance < request.amount:
                raise BadRequestError("insufficient balance")

            total = self._investments.total_by_loan(request.loan_id)
            total_after = total + request.amount
            if total_after > loan.principal_amount:
                raise BadRequestError(
                    "total investment would exceed loan principal amount"
                )

            investment = self._investments.create(
                Investment(
                    loan_id=request.loan_id,
                    investor_id=investor_id,
                    amount=request.amount,
                ),
                tx,
            )
            self._investors.update_with_map(
                investor_id, {"balance": investor.balance - request.amount}, tx
            )
            self._mark_invested(loan, total_after, tx)

            self._bus.publish(
                MAIL_SEND_TOPIC,
                MailSendRequest(
                    to=investor.email,
                    subject="Your Investment is Confirmed",
                    template="investment_confirmed.html",
                    data={
                        "InvestmentID": str(investment.id),
                        "LoanID": str(loan.id),
                        "InvestorName": investor.full_name,
                        "InvestmentAmount": request.amount,
                        "ROI": loan.roi,
                        "AgreementDate": investment.created_at,
                        "AppUrl": self._app_url,
                        "Year": datetime.now().year,
                    },
                ),
            )
        return investment

    def _mark_invested(self, loan, total_after, tx):
        if total_after != loan.principal_amount:
            return
        self._loans.update_with_map(loan.id, {"state": LoanState.INVESTED}, tx)
        borrower = self._borrowers.get_by_id(loan.borrower_id)
        email = borrower.email if borrower is not None else ""
        name = borrower.full_name if borrower is not None else ""
        self._bus.publish(
            MAIL_SEND_TOPIC,
            MailSendRequest(
                to=email,
                subject="Your Loan Has Been Funded",
                template="loan_invested.html",
                data={
                    "BorrowerName": name,
                    "LoanID": str(loan.id),
                    "LoanAmount": loan.principal_amount,
                    "InterestRate": loan.rate,
                    "AppUrl": self._app_url,
                    "Year": datetime.now().year,
                },
            ),
        )

    def investment_agreement(self, investment_id):
        """Details for the agreement document of one investment."""
        investment = self._investments.get_by_id(investment_id)
        if _missing(investment):
            raise NotFoundError("investment not found")
        loan = self._loans.get_by_id(investment.loan_id)
        if _missing(loan):
            raise NotFoundError("loan not found")
        investor = self._investors.get_by_id(investment.investor_id)
        if _missing(investor):
            raise NotFoundError("investor not found")
        borrower = self._borrowers.get_by_id(loan.borrower_id)
        if _missing(borrower):
            raise NotFoundError("borrower not found")
        return InvestmentAgreementResponse(
            agreement_id=investment.id,
            agreement_date=investment.created_at,
            investment_amount=investment.amount,
            roi=loan.roi,
            loan_id=loan.id,
            investor_name=investor.full_name,
            borrower_name=borrower.full_name,
        )