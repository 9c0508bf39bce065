# lendingdesk

Building blocks for a small peer-to-peer lending back office. Employees
propose, approve, reject and disburse loans; investors fund approved loans
until the principal is covered. Every step is guarded by the loan's state, and
confirmation e-mails are handed to an in-process event bus for delivery in the
background.

## Loan lifecycle

```
proposed ──approve──▶ approved ──fully invested──▶ invested ──disburse──▶ disbursed
    │
    └──reject──▶ rejected
```

- A loan can only be rejected or approved while it is `proposed`.
- Investments are accepted only while the loan is `approved`, only if the
  investor's balance covers the amount, and never beyond the principal.
- When the investments reach the principal exactly, the loan becomes
  `invested` and a mail request for the borrower is published.
- A loan can only be disbursed while it is `invested`.

## Installing

```
pip install .
pip install ".[test]"   # with pytest
```

## What is in the package

| Module | Contents |
|--------|----------|
| `lendingdesk.errors` | `AppError` and its subclasses `NotFoundError` (404), `ForbiddenError` (403), `BadRequestError` (400), `InternalServerError` (500), each with `message`, `errors` and `status_code` |
| `lendingdesk.config` | `load(path, environ)` returning a frozen `Config` with `ApplicationConfig`, `PostgresConfig`, `MailConfig`, `JaegerConfig` and `context_timeout` |
| `lendingdesk.models` | SQLAlchemy records `Borrower`, `Employee`, `Investor`, `Investment`, `Loan` on `Base`; `LoanState`; `MailSendRequest`; `new_id()` for version 7 UUIDs |
| `lendingdesk.dto` | request and response dataclasses, `from_payload(cls, payload)` and `validate(request)` |
| `lendingdesk.repository` | `BaseRepository` (reads from a replica engine, writes to a primary), `Pagination`, the `JSONB` column type, `to_json` and `from_json` |
| `lendingdesk.repositories` | `BorrowerRepository`, `EmployeeRepository`, `InvestorRepository`, `LoanRepository`, `InvestmentRepository` (with `total_by_loan`) |
| `lendingdesk.database` | `build_dsn`, `open_engine`, `open_connection` and `DatabaseConnection` |
| `lendingdesk.bus` | `EventBus`, a thread-safe publish/subscribe bus with synchronous, threaded, one-shot and serialised handlers |
| `lendingdesk.templates` | `TemplateRenderer` and the formatters `format_number`, `format_currency`, `format_date` |
| `lendingdesk.mailer` | `MailSender`, which renders a template and sends it over SMTP |
| `lendingdesk.mail_service` | `MailService` and `register_mail_listener(bus, service)` for the `mail.send` topic |
| `lendingdesk.loan_service` | `LoanService` with the loan lifecycle rules |
| `lendingdesk.investment_service` | `InvestmentService` with the investment rules and agreement lookups |
| `lendingdesk.middleware` | Flask helpers: `require_role`, `error_body`, `register_error_handlers` |

## Configuration

`lendingdesk.config.load(path, environ)` reads a dotenv file (by default
`.env`) and lets non-empty values in `environ` (by default `os.environ`) take
precedence. A missing file raises `FileNotFoundError`; a value that cannot be
converted raises `ValueError`.

```
APP_NAME=lendingdesk
APP_ENV=development
APP_PORT=8080
APP_URL=http://localhost:8080
CONTEXT_TIMEOUT=5

POSTGRES_MASTER_HOST=localhost
POSTGRES_MASTER_USERNAME=user
POSTGRES_MASTER_PASSWORD=password
POSTGRES_MASTER_PORT=5432
POSTGRES_MASTER_SSL_MODE=disable
POSTGRES_SLAVE_HOST=localhost
POSTGRES_SLAVE_USERNAME=user
POSTGRES_SLAVE_PASSWORD=password
POSTGRES_SLAVE_PORT=5432
POSTGRES_SLAVE_SSL_MODE=disable
POSTGRES_DATABASE=lending
POSTGRES_TIMEZONE=Asia/Jakarta
POSTGRES_MAX_OPEN_CONNECTIONS=10
POSTGRES_MAX_IDLE_CONNECTIONS=10
POSTGRES_CONN_MAX_LIFETIME=300

MAIL_HOST=localhost
MAIL_PORT=1025
MAIL_USERNAME=noreply@example.com
MAIL_PASSWORD=password
MAIL_TLS=false
```

`CONTEXT_TIMEOUT`, `POSTGRES_TIMEZONE`, the two connection counts and
`POSTGRES_CONN_MAX_LIFETIME` have the defaults shown. Durations are in seconds.

## Wiring the pieces

```python
from sqlalchemy import create_engine

from lendingdesk.bus import EventBus
from lendingdesk.dto import CreateLoanRequest, from_payload, validate
from lendingdesk.investment_service import InvestmentService
from lendingdesk.loan_service import LoanService
from lendingdesk.models import Base
from lendingdesk.repositories import (
    BorrowerRepository, EmployeeRepository, InvestmentRepository,
    InvestorRepository, LoanRepository,
)

engine = create_engine("sqlite:///lending.db")
Base.metadata.create_all(engine)

loans = LoanRepository(engine)
borrowers = BorrowerRepository(engine)
employees = EmployeeRepository(engine)
investors = InvestorRepository(engine)
investments = InvestmentRepository(engine)

bus = EventBus()
loan_service = LoanService(loans, borrowers, employees)
investment_service = InvestmentService(
    investments, investors, loans, borrowers, bus, "http://localhost:8080"
)

request = from_payload(CreateLoanRequest, {"borrower_id": "...", "principal_amount": 1000})
problems = validate(request)   # e.g. ["Rate is a required field", ...]
```

Each repository takes a write engine and an optional read engine; without the
second one, reads use the write engine. For PostgreSQL,
`lendingdesk.database.open_connection(config.postgres)` opens and pings both
engines and returns a `DatabaseConnection` whose `master` and `slave` engines
can be passed to the repositories; `close()` (or leaving a `with` block)
disposes them.

The services raise `NotFoundError` or `BadRequestError` when a rule is broken.
`InvestmentService.add_investment` runs in one transaction that is rolled back
on any error, and publishes `MailSendRequest` messages on the `mail.send`
topic.

## Sending mail

```python
from lendingdesk.mail_service import MailService, register_mail_listener
from lendingdesk.mailer import MailSender
from lendingdesk.templates import TemplateRenderer

sender = MailSender(config.mail, TemplateRenderer("templates"))
register_mail_listener(bus, MailService(sender))
```

`TemplateRenderer` loads every `*.html` file one directory below the given
directory and addresses templates by file name. Templates can call
`FormatNumber`, `FormatCurrency` and `FormatDate`, or use the filters
`format_number`, `format_currency` and `format_date`:
`format_currency(1500000)` gives `Rp1.500.000`. `MailService.send` logs
delivery failures instead of raising them; `EventBus.wait_async()` blocks
until threaded handlers have finished.

## Flask helpers

`require_role("employee")` or `require_role("investor")` decorates a view so it
runs only when an `x-employee-id` or `x-investor-id` header holds a UUID,
which is stored on `flask.g` as `employee_id` or `investor_id`; otherwise the
response is a 403 with a JSON message. `register_error_handlers(app)` turns
`AppError` exceptions into `{"message": ..., "errors": [...]}` responses with
the error's status, and any other exception into a 500.

## What the package does not do

There is no command to run and no HTTP server or route table: the package
provides the services, storage and helpers, and an application has to define
its own Flask views around them. It does not create or migrate database
schemas beyond what `Base.metadata` offers, and it ships no HTML templates.