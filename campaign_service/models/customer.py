"""
客户模型
Customers are owned by another service; this one only reads them to resolve
campaign audiences.
"""
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

from campaign_service.models.common import CamelModel


class CustomerBase(SQLModel):
    customer_id: str = Field(index=True, unique=True)
    name: Optional[str] = None
    email: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    city: Optional[str] = Field(default=None, index=True)
    gender: Optional[str] = None
    age: Optional[int] = Field(default=None, index=True)
    total_spend: float = Field(default=0)
    visits: int = Field(default=0)
    last_active: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Customer(CustomerBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)


class CustomerRead(CamelModel):
    customer_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    total_spend: float = 0
    visits: int = 0
    last_active: Optional[datetime] = None
    created_at: Optional[datetime] = None
