"""
Ledger Engine - Foreign Currency Models

Foreign-currency bank accounts, daily exchange rates and the monthly
unrealized gain/loss revaluation history.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean, Date, ForeignKey, Numeric, String, UniqueConstraint, Index
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_engine.models.base import BaseModel, TenantMixin


class BankAccount(BaseModel, TenantMixin):
    """Bank account held in any currency; balance in account currency units."""

    __tablename__ = "bank_accounts"

    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    bank_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    account_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="JMD", nullable=False)

    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), default=Decimal("0.00"), nullable=False,
    )
    original_exchange_rate: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(18, 6), nullable=True,
        comment="Rate at which the balance was originally booked",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    gl_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("gl_accounts.id", ondelete="SET NULL"),
        nullable=True,
    )


class ExchangeRate(BaseModel, TenantMixin):
    """Rate to convert one unit of from_currency into to_currency on a date."""

    __tablename__ = "exchange_rates"

    from_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    to_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    rate_date: Mapped[date] = mapped_column(Date, nullable=False)
    source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        Index('ix_exchange_rates_pair_date', 'tenant_id', 'from_currency', 'to_currency', 'rate_date'),
    )


class RevaluationEntry(BaseModel, TenantMixin):
    """
    Month-end revaluation of one bank account.

    unrealized_gain_loss = current_jmd_value - previous_jmd_value
    """

    __tablename__ = "revaluation_entries"

    bank_account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("bank_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    revaluation_month: Mapped[date] = mapped_column(
        Date, nullable=False,
        comment="First day of the revalued month",
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    previous_rate: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    current_rate: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    foreign_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    previous_jmd_value: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    current_jmd_value: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    unrealized_gain_loss: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    bank_account: Mapped["BankAccount"] = relationship("BankAccount")

    __table_args__ = (
        UniqueConstraint('bank_account_id', 'revaluation_month', name='uq_revaluation_account_month'),
    )
