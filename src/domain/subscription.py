"""Subscription Domain Entities

A consumer's subscription plan and the allocation events it produces.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Date
from src.domain.base import BaseModel, generate_uuid


class SubscriptionStatus(str, Enum):
    """Subscription status types"""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Subscription(BaseModel, table=True):
    """
    Subscription - Consumer plan with a monthly credit allocation

    Domain Rules:
    - Each active subscription allocates monthly_credits to its user
    - Status transitions: active -> cancelled/expired
    - end_date is optional (None = ongoing)
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index('ix_subscriptions_user_id', 'user_id'),
        Index('ix_subscriptions_status', 'status'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique subscription identifier"
    )

    user_id: str = Field(
        description="Subscribed consumer"
    )

    status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        description="Subscription status (active, cancelled, expired)"
    )

    plan_name: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Name of the subscription plan"
    )

    monthly_credits: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Monthly credit allocation (precision: 18,6)"
    )

    start_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Subscription start date"
    )

    end_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Subscription end date (None = ongoing)"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SubscriptionEvent(BaseModel, table=True):
    """
    Subscription Event - Append-only record of something that happened to a subscription

    Inserting an event with credits_allocated > 0 notifies the owning user.
    """

    __tablename__ = "subscription_events"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    subscription_id: str = Field(index=True)
    event_type: str = Field(description="e.g. credits_allocated, renewed, cancelled")

    credits_allocated: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
    )

    period: Optional[str] = Field(default=None, description="Billing period, e.g. 2024-01")
    created_at: datetime = Field(default_factory=datetime.utcnow)
