import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, select

from campaign_service.core.exceptions import StoreUnavailableException
from campaign_service.models.customer import Customer

logger = logging.getLogger(__name__)


class AudienceResolver:
    """Runs a customer predicate against the customer store. Read-only, unbounded."""

    def __init__(self, session: Session):
        self.session = session

    def resolve_ids(self, predicate: ColumnElement) -> List[str]:
        query = select(Customer.customer_id).where(predicate).order_by(Customer.id)
        try:
            return list(self.session.exec(query).all())
        except SQLAlchemyError as e:
            logger.error(f"Audience resolution failed: {e}")
            raise StoreUnavailableException("Customer store unavailable") from e

    def resolve_customers(self, predicate: ColumnElement) -> List[Customer]:
        query = select(Customer).where(predicate).order_by(Customer.id)
        try:
            return list(self.session.exec(query).all())
        except SQLAlchemyError as e:
            logger.error(f"Audience preview failed: {e}")
            raise StoreUnavailableException("Customer store unavailable") from e
