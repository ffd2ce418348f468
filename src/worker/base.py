"""Shared plumbing for background workers

A worker owns (or is handed) an async session factory and exposes
``run_once``; ``run_forever`` and the CLI entry point are common.
"""

import asyncio
import argparse
import logging
from typing import Any, Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig

logger = logging.getLogger(__name__)


class BaseWorker:
    """
    Base class for background workers

    Usage:
        # Run once
        worker = SomeWorker()
        result = await worker.run_once()

        # Run continuously
        await worker.run_forever(interval_seconds=86400)
    """

    default_interval_seconds = 86400

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory: Optional[sessionmaker] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            session_factory: Shared session factory; when given no engine is created
        """
        if session_factory is not None:
            self.engine = None
            self.async_session_factory = session_factory
        else:
            self.db_uri = db_uri or ApplicationConfig.DB_URI
            self.engine = create_async_engine(self.db_uri, echo=False, future=True)
            self.async_session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )

        logger.info(f"{type(self).__name__} initialized")

    async def run_once(self) -> Any:
        raise NotImplementedError

    def describe(self, result: Any) -> str:
        return str(result)

    async def run_forever(self, interval_seconds: Optional[int] = None):
        """
        Run continuously at the specified interval

        A failed cycle is logged and the loop keeps going.
        """
        interval_seconds = interval_seconds or self.default_interval_seconds
        logger.info(f"Starting {type(self).__name__} with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(f"{type(self).__name__} cycle complete. {self.describe(result)}")
            except Exception as e:
                logger.error(f"{type(self).__name__} cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        if self.engine is not None:
            await self.engine.dispose()
        logger.info(f"{type(self).__name__} shutdown complete")


async def run_worker_main(worker: BaseWorker, description: str):
    """
    Shared CLI entry point

    Usage:
        python -m src.worker.<module> --once
        python -m src.worker.<module> --interval 3600
    """
    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=worker.default_interval_seconds,
        help=f"Interval between runs in seconds (default: {worker.default_interval_seconds})"
    )
    args = parser.parse_args()

    try:
        if args.once:
            result = await worker.run_once()
            print(worker.describe(result))
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()
