"""
战役服务
Preview, create, list, get, update and delete campaigns. Audiences are
computed from targeting rules at write time and stored on the campaign.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from campaign_service.core.config import settings
from campaign_service.core.exceptions import (
    CampaignNotFoundException,
    StoreUnavailableException,
    ValidationException,
)
from campaign_service.models.campaign import (
    Campaign,
    CampaignCreate,
    CampaignStatus,
    CampaignUpdate,
    TargetingRule,
    history_entry,
)
from campaign_service.models.customer import Customer
from campaign_service.services.audience_resolver import AudienceResolver
from campaign_service.services.rule_translator import build_customer_filter
from campaign_service.services.sequence import SequenceGenerator, format_campaign_id

logger = logging.getLogger(__name__)


def check_campaign_invariants(campaign: Campaign) -> None:
    """Cross-field rules that must hold before a campaign is persisted."""
    if campaign.end_date is not None and campaign.end_date <= campaign.start_date:
        raise ValidationException(
            "endDate must be after startDate",
            details={"start_date": campaign.start_date, "end_date": campaign.end_date},
        )
    if campaign.budget < 0 or campaign.spent < 0:
        raise ValidationException("budget and spent must be non-negative")
    if campaign.spent > campaign.budget:
        raise ValidationException(
            "spent may not exceed budget",
            details={"budget": campaign.budget, "spent": campaign.spent},
        )


def _dump_rules(rules: Sequence[TargetingRule]) -> List[dict]:
    return [rule.model_dump(mode="json") for rule in rules]


class CampaignService:
    def __init__(
        self,
        session: Session,
        sequence: SequenceGenerator,
        sequence_name: Optional[str] = None,
        id_prefix: Optional[str] = None,
        id_width: Optional[int] = None,
    ):
        self.session = session
        self.sequence = sequence
        self.resolver = AudienceResolver(session)
        self.sequence_name = sequence_name or settings.CAMPAIGN_SEQUENCE_NAME
        self.id_prefix = id_prefix or settings.CAMPAIGN_ID_PREFIX
        self.id_width = id_width or settings.CAMPAIGN_ID_WIDTH

    @contextmanager
    def _transaction(self, action: str):
        """Commit on success; roll back and translate store errors otherwise."""
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise StoreUnavailableException() from e
        except Exception:
            self.session.rollback()
            raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def preview(self, rules: Sequence[TargetingRule]) -> List[Customer]:
        predicate = build_customer_filter(rules)
        return self.resolver.resolve_customers(predicate)

    def list_all(self) -> List[Campaign]:
        query = select(Campaign).order_by(Campaign.created_at.desc(), Campaign.id.desc())
        try:
            return list(self.session.exec(query).all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list campaigns: {e}")
            raise StoreUnavailableException() from e

    def get(self, campaign_id: str) -> Campaign:
        query = select(Campaign).where(Campaign.campaign_id == campaign_id)
        try:
            campaign = self.session.exec(query).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load campaign {campaign_id}: {e}")
            raise StoreUnavailableException() from e
        if campaign is None:
            raise CampaignNotFoundException(campaign_id)
        return campaign

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, payload: CampaignCreate) -> Campaign:
        if not payload.rules:
            raise ValidationException("Targeting rules are required to create a campaign")

        # Rejects bad rules before an identifier is spent
        predicate = build_customer_filter(payload.rules)

        with self._transaction("create campaign"):
            seq = self.sequence.next(self.sequence_name)
            target_customers = self.resolver.resolve_ids(predicate)
            campaign = Campaign(
                campaign_id=format_campaign_id(seq, self.id_prefix, self.id_width),
                name=payload.name,
                description=payload.description,
                start_date=payload.start_date,
                end_date=payload.end_date,
                budget=payload.budget,
                targeting_rules=_dump_rules(payload.rules),
                target_customers=target_customers,
                history=[
                    history_entry(
                        "Campaign Created",
                        f"Targeted {len(target_customers)} customers based on rules",
                    )
                ],
            )
            check_campaign_invariants(campaign)
            self.session.add(campaign)

        self.session.refresh(campaign)
        logger.info(f"Campaign created: {campaign.campaign_id} targeting {len(target_customers)} customers")
        return campaign

    def update(self, campaign_id: str, patch: CampaignUpdate) -> Campaign:
        campaign = self.get(campaign_id)

        update_data = patch.model_dump(exclude_unset=True, exclude={"rules"})
        if "status" in update_data:
            update_data["status"] = CampaignStatus(update_data["status"]).value

        with self._transaction("update campaign"):
            if patch.rules:
                predicate = build_customer_filter(patch.rules)
                target_customers = self.resolver.resolve_ids(predicate)
                campaign.targeting_rules = _dump_rules(patch.rules)
                campaign.target_customers = target_customers
                campaign.history = [
                    *campaign.history,
                    history_entry(
                        "Targeting Updated",
                        f"Re-targeted {len(target_customers)} customers based on updated rules",
                    ),
                ]

            for key, value in update_data.items():
                setattr(campaign, key, value)

            check_campaign_invariants(campaign)
            campaign.updated_at = datetime.utcnow()
            self.session.add(campaign)

        self.session.refresh(campaign)
        logger.info(f"Campaign updated: {campaign.campaign_id} fields={sorted(update_data)} rules={'yes' if patch.rules else 'no'}")
        return campaign

    def delete(self, campaign_id: str) -> None:
        campaign = self.get(campaign_id)
        with self._transaction("delete campaign"):
            self.session.delete(campaign)
        logger.info(f"Campaign deleted: {campaign_id}")
