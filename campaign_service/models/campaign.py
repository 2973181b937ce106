"""
战役模型
Marketing campaigns, the customers they target, and their API schemas.
"""
from enum import Enum
from typing import Any, Dict, Optional, List
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from datetime import datetime
from pydantic import Field as SchemaField, field_validator, model_validator

from campaign_service.models.common import CamelModel, as_naive_utc
from campaign_service.models.customer import CustomerRead


class CampaignStatus(str, Enum):
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Operator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    IN = "in"
    NOT_IN = "not_in"


class TargetingRule(CamelModel):
    field: str = SchemaField(min_length=1)
    # Kept as a plain string: unknown operators are reported by the translator.
    operator: str
    value: Any = None


class Campaign(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    campaign_id: str = Field(index=True, unique=True)
    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    start_date: datetime
    end_date: Optional[datetime] = None

    # 定向规则与受众快照
    targeting_rules: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    target_customers: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    budget: float = Field(default=0)
    spent: float = Field(default=0)
    status: str = Field(default=CampaignStatus.PLANNED.value, index=True)

    # append-only: [{date, event, details}]
    history: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


def history_entry(event: str, details: Optional[str] = None) -> Dict[str, Any]:
    return {"date": datetime.utcnow().isoformat(), "event": event, "details": details}


# ---------------------------------------------------------------------------
# API schemas
# ---------------------------------------------------------------------------

class HistoryEntry(CamelModel):
    date: datetime
    event: str
    details: Optional[str] = None


class CampaignRead(CamelModel):
    campaign_id: str
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    targeting_rules: List[TargetingRule] = []
    target_customers: List[str] = []
    budget: float = 0
    spent: float = 0
    status: CampaignStatus = CampaignStatus.PLANNED
    history: List[HistoryEntry] = []
    created_at: datetime
    updated_at: datetime


class CampaignCreate(CamelModel):
    name: str = SchemaField(min_length=1, max_length=100)
    description: Optional[str] = SchemaField(default=None, max_length=500)
    start_date: datetime
    end_date: Optional[datetime] = None
    budget: float = SchemaField(default=0, ge=0)
    rules: List[TargetingRule] = []

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(v)

    @model_validator(mode="after")
    def check_date_range(self) -> "CampaignCreate":
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class CampaignUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""
    name: Optional[str] = SchemaField(default=None, min_length=1, max_length=100)
    description: Optional[str] = SchemaField(default=None, max_length=500)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    budget: Optional[float] = SchemaField(default=None, ge=0)
    spent: Optional[float] = SchemaField(default=None, ge=0)
    status: Optional[CampaignStatus] = None
    rules: Optional[List[TargetingRule]] = None

    @field_validator("name", "start_date", "budget", "spent", "status")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(v)

    @model_validator(mode="after")
    def check_consistency(self) -> "CampaignUpdate":
        if self.start_date is not None and self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        if self.budget is not None and self.spent is not None and self.spent > self.budget:
            raise ValueError("spent may not exceed budget")
        return self


class PreviewRequest(CamelModel):
    rules: List[TargetingRule] = []


class PreviewResponse(CamelModel):
    success: bool = True
    matched_count: int
    customers: List[CustomerRead]


class CampaignResponse(CamelModel):
    success: bool = True
    campaign: CampaignRead


class CampaignMutationResponse(CamelModel):
    success: bool = True
    message: str
    campaign: CampaignRead


class CampaignListResponse(CamelModel):
    success: bool = True
    campaigns: List[CampaignRead]


class MessageResponse(CamelModel):
    success: bool = True
    message: str
