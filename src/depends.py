from decimal import Decimal
from typing import Optional
from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.broadcaster import Broadcaster
from src.app.services.email_sender import EmailSender
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.app.services.payment_processor import PaymentProcessor

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_config(request: Request):
    return request.app.state.config


def get_tax_rate(request: Request) -> Decimal:
    return request.app.state.tax_rate


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_payment_processor(request: Request) -> Optional[PaymentProcessor]:
    return request.app.state.payment_processor


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def get_invoice_locks(request: Request) -> InvoiceLockRegistry:
    return request.app.state.invoice_locks


def get_job_runner(request: Request):
    return request.app.state.job_runner
