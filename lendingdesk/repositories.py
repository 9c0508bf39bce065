"""Repositories for each lending record type."""

from __future__ import annotations

import uuid

from sqlalchemy import func, select

from .models import Borrower, Employee, Investment, Investor, Loan
from .repository import BaseRepository


class BorrowerRepository(BaseRepository):
    """Data access for borrowers."""

    def __init__(self, write_engine, read_engine=None):
        super().__init__(Borrower, write_engine, read_engine)


class EmployeeRepository(BaseRepository):
    """Data access for employees."""

    def __init__(self, write_engine, read_engine=None):
        super().__init__(Employee, write_engine, read_engine)


class InvestorRepository(BaseRepository):
    """Data access for investors."""

    def __init__(self, write_engine, read_engine=None):
        super().__init__(Investor, write_engine, read_engine)


class LoanRepository(BaseRepository):
    """Data access for loans."""

    def __init__(self, write_engine, read_engine=None):
        super().__init__(Loan, write_engine, read_engine)


class InvestmentRepository(BaseRepository):
    """Data access for investments."""

    def __init__(self, write_engine, read_engine=None):
        super().__init__(Investment, write_engine, read_engine)

    def total_by_loan(self, loan_id):
        """Sum of the live investment amounts placed in *loan_id*; 0.0 if none."""
        if not isinstance(loan_id, uuid.UUID):
            loan_id = uuid.UUID(str(loan_id))
        stmt = select(func.coalesce(func.sum(Investment.amount), 0.0)).where(
            Investment.loan_id == loan_id,
            Investment.deleted_at.is_(None),
        )
        with self._reader() as session:
            return float(session.scalar(stmt) or 0.0)