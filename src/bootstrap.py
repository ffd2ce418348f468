"""Database bootstrap

Creates the schema and seeds reference data. Safe to run repeatedly:

    python -m src.bootstrap
"""

import asyncio
import logging
from decimal import Decimal
from typing import List
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from config import ApplicationConfig
from src.domain.service import Service
from src.domain.user import User, UserRole

logger = logging.getLogger(__name__)


DEFAULT_SERVICES = [
    {"id": "svc_regular", "name": "Regular Cleaning", "base_price": Decimal("99.00"),
     "duration_minutes": 120, "description": "Standard home cleaning"},
    {"id": "svc_deep", "name": "Deep Cleaning", "base_price": Decimal("179.00"),
     "duration_minutes": 240, "description": "Top-to-bottom detailed cleaning"},
    {"id": "svc_moveout", "name": "Move-Out Cleaning", "base_price": Decimal("249.00"),
     "duration_minutes": 300, "description": "Empty home cleaning for move in or out"},
    {"id": "svc_office", "name": "Office Cleaning", "base_price": Decimal("199.00"),
     "duration_minutes": 180, "description": "Commercial office cleaning"},
    {"id": "svc_window", "name": "Window Cleaning", "base_price": Decimal("79.00"),
     "duration_minutes": 90, "description": "Interior and exterior windows"},
    {"id": "svc_carpet", "name": "Carpet Cleaning", "base_price": Decimal("149.00"),
     "duration_minutes": 150, "description": "Steam carpet cleaning"},
]


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all, checkfirst=True)


async def seed(session: AsyncSession, admin_email: str) -> List[str]:
    """
    Insert default services and the admin user when absent

    Returns:
        Identifiers of the rows inserted
    """
    inserted = []

    for data in DEFAULT_SERVICES:
        existing = await session.get(Service, data["id"])
        if existing is None:
            session.add(Service(**data))
            inserted.append(data["id"])

    result = await session.execute(select(User).where(User.email == admin_email.lower()))
    if result.scalars().first() is None:
        session.add(
            User(email=admin_email.lower(), first_name="Admin", last_name="", role=UserRole.ADMIN)
        )
        inserted.append(admin_email.lower())

    await session.commit()
    return inserted


async def bootstrap(engine: AsyncEngine, admin_email: str) -> List[str]:
    await create_schema(engine)
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        inserted = await seed(session, admin_email)

    if inserted:
        logger.info(f"Seeded: {', '.join(inserted)}")
    else:
        logger.info("Database already initialized; nothing to seed")
    return inserted


async def main():
    from src.depends import engine

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        await bootstrap(engine, ApplicationConfig.DEFAULT_ADMIN_EMAIL)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
