import pytest_asyncio
from datetime import date
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.bootstrap import bootstrap
from src.depends import get_session
from src.domain.customer import Customer
from src.domain.invoice import Invoice, InvoiceStatus


class IntegrationConfig(ApplicationConfig):
    AUTH_DISABLED = True
    SCHEDULER_ENABLED = False
    ENABLE_LOGGING_MIDDLEWARE = False
    CORS_ORIGINS = []
    EMAIL_PROVIDER = "log"
    BUSINESS_NOTIFICATION_EMAIL = None
    STRIPE_SECRET_KEY = ""
    STRIPE_WEBHOOK_SECRET = ""
    TAX_RATE = "0.08"
    AUTO_INVOICE_ON_COMPLETION = True
    RECURRING_HORIZON_DAYS = 14


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite database, schema and reference data per test"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'cleaning_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)
    await bootstrap(engine, "admin@bubblebee.com")

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


def build_client(config, session_factory):
    from src.api.app import create_app

    app = create_app(config, session_factory=session_factory)

    # One session per request, like production
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return app, AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def app_and_client(session_factory):
    app, client = build_client(IntegrationConfig, session_factory)
    async with client as ac:
        yield app, ac


@pytest_asyncio.fixture
async def client(app_and_client):
    return app_and_client[1]


@pytest_asyncio.fixture
async def customer(db_session):
    customer = Customer(
        email="dana@example.com",
        first_name="Dana",
        last_name="Reyes",
        address="12 Elm St",
        city="Austin",
    )
    db_session.add(customer)
    await db_session.commit()
    return customer


@pytest_asyncio.fixture
async def sent_invoice(db_session, customer):
    """A sent 100.00 invoice due 2024-05-15"""
    invoice = Invoice(
        invoice_number="INV-1001",
        customer_id=customer.id,
        subtotal=Decimal("100.00"),
        tax_rate=Decimal("0.00"),
        tax_amount=Decimal("0.00"),
        discount_amount=Decimal("0.00"),
        total=Decimal("100.00"),
        amount_paid=Decimal("0.00"),
        amount_due=Decimal("100.00"),
        status=InvoiceStatus.SENT,
        issue_date=date(2024, 5, 1),
        due_date=date(2024, 5, 15),
    )
    db_session.add(invoice)
    await db_session.commit()
    return invoice


class StripeConfig(IntegrationConfig):
    STRIPE_SECRET_KEY = "sk_test_integration"
    STRIPE_WEBHOOK_SECRET = "whsec_integration"


@pytest_asyncio.fixture
async def stripe_client(session_factory):
    """Client for an app with card payments configured"""
    _, client = build_client(StripeConfig, session_factory)
    async with client as ac:
        yield ac


class AuthConfig(IntegrationConfig):
    AUTH_DISABLED = False
    JWT_SECRET = "integration-secret"


@pytest_asyncio.fixture
async def auth_app_and_client(session_factory):
    """App that enforces bearer tokens"""
    app, client = build_client(AuthConfig, session_factory)
    async with client as ac:
        yield app, ac
