"""HTML templates and the number and date formatters they use."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from pathlib import Path

from jinja2 import DictLoader, Environment

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _group_thousands(amount):
    sign = ""
    if amount < 0:
        sign = "-"
        amount = -amount
    digits = f"{amount:.0f}"
    head = len(digits) % 3 or 3
    groups = [digits[:head]]
    groups.extend(digits[i:i + 3] for i in range(head, len(digits), 3))
    return sign, ".".join(groups)


def format_number(amount):
    """Round to a whole number and group thousands with dots."""
    sign, grouped = _group_thousands(amount)
    return sign + grouped


def format_currency(amount):
    """Format an amount in rupiah, e.g. ``Rp`` followed by the grouped number."""
    sign, grouped = _group_thousands(amount)
    return f"{sign}Rp{grouped}"


def format_date(date):
    """Format a date as day, full English month name and year."""
    return f"{date.day:02d} {_MONTHS[date.month - 1]} {date.year}"


def _context(data):
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return {f.name: getattr(data, f.name) for f in dataclasses.fields(data)}
    return dict(vars(data))


class TemplateRenderer:
    """Renders the HTML templates found one directory below *directory*.

    Templates are addressed by file name; a later file with the same name
    replaces an earlier one.
    """

    def __init__(self, directory="templates"):
        root = Path(directory)
        sources = {
            path.name: path.read_text(encoding="utf-8")
            for path in sorted(root.glob("*/*.html"))
        }
        if not sources:
            raise FileNotFoundError(f"no templates match {root / '*' / '*.html'}")
        self._env = Environment(loader=DictLoader(sources), autoescape=True)
        helpers = {
            "FormatNumber": format_number,
            "FormatCurrency": format_currency,
            "FormatDate": format_date,
        }
        self._env.globals.update(helpers)
        self._env.filters.update(
            format_number=format_number,
            format_currency=format_currency,
            format_date=format_date,
        )

    @property
    def names(self):
        return sorted(self._env.list_templates())

    def render(self, name, data=None):
        """Render template *name* with *data*; raises TemplateNotFound if absent."""
        return self._env.get_template(name).render(_context(data))