"""
API dependencies for dependency injection
"""

from typing import Generator
from fastapi import Depends
from sqlalchemy.orm import Session
from domain.models import get_db_session
from services import CatalogService, NotificationService, OrderService


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)
