"""
Ledger Engine - Foreign Exchange Service

Exchange rates, foreign-currency bank accounts and month-end revaluation.

Revaluation restates each active foreign-currency bank balance in JMD at
the month-end rate:

    previous_jmd = round(balance x previous_rate)
    current_jmd  = round(balance x current_rate)
    unrealized   = current_jmd - previous_jmd

previous_rate chains from the latest earlier revaluation of the account,
falling back to the rate the balance was originally booked at. Accounts
with no resolvable rate are skipped with a reason, never zeroed.
"""

import calendar
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_engine.config import settings
from ledger_engine.models.fx import BankAccount, ExchangeRate, RevaluationEntry
from ledger_engine.schemas.fx import BankAccountCreate, ExchangeRateCreate
from ledger_engine.services.rate_cache import RateCache, get_rate_cache
from ledger_engine.utils.error_handling import InvalidAmountException, NotFoundException
from ledger_engine.utils.money import ONE, ZERO, round2, round_rate

logger = logging.getLogger(__name__)


SKIP_NO_RATE = "no_exchange_rate"


@dataclass
class RevaluationLine:
    bank_account_id: uuid.UUID
    account_name: str
    currency: str
    foreign_balance: Decimal
    previous_rate: Decimal
    current_rate: Decimal
    previous_jmd_value: Decimal
    current_jmd_value: Decimal
    unrealized_gain_loss: Decimal


@dataclass
class SkippedAccount:
    bank_account_id: uuid.UUID
    account_name: str
    currency: str
    reason: str


@dataclass
class RevaluationSummary:
    revaluation_month: date
    is_preview: bool = False
    processed: List[RevaluationLine] = field(default_factory=list)
    skipped: List[SkippedAccount] = field(default_factory=list)
    total_unrealized_gain_loss: Decimal = ZERO

    @property
    def processed_count(self) -> int:
        return len(self.processed)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def month_bounds(year: int, month: int):
    """(first day, last day) of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def revalue_balance(balance: Decimal, previous_rate: Decimal, current_rate: Decimal):
    """(previous_jmd, current_jmd, unrealized gain/loss) for one balance."""
    previous_jmd = round2(balance * previous_rate)
    current_jmd = round2(balance * current_rate)
    return previous_jmd, current_jmd, current_jmd - previous_jmd


class FXService:
    """Service for exchange rates and foreign-currency revaluation."""

    def __init__(self, db: AsyncSession, rate_cache: Optional[RateCache] = None):
        self.db = db
        self._rate_cache = rate_cache

    @property
    def rate_cache(self) -> RateCache:
        if self._rate_cache is None:
            self._rate_cache = get_rate_cache()
        return self._rate_cache

    # =========================================================================
    # EXCHANGE RATES
    # =========================================================================

    async def _latest_rate(
        self,
        tenant_id: uuid.UUID,
        from_currency: str,
        to_currency: str,
        as_of: date,
    ) -> Optional[Decimal]:
        result = await self.db.execute(
            select(ExchangeRate.rate)
            .where(and_(
                ExchangeRate.tenant_id == tenant_id,
                ExchangeRate.from_currency == from_currency,
                ExchangeRate.to_currency == to_currency,
                ExchangeRate.rate_date <= as_of,
            ))
            .order_by(ExchangeRate.rate_date.desc(), ExchangeRate.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_exchange_rate(
        self,
        tenant_id: uuid.UUID,
        from_currency: str,
        to_currency: Optional[str] = None,
        as_of: Optional[date] = None,
        use_cache: Optional[bool] = None,
    ) -> Optional[Decimal]:
        """
        Rate to convert one unit of from_currency into to_currency.

        Uses the latest rate on or before as_of; falls back to the inverse
        of the reverse pair. None when neither exists.
        """
        from_currency = from_currency.upper()
        to_currency = (to_currency or settings.home_currency).upper()
        if from_currency == to_currency:
            return ONE
        as_of = as_of or date.today()
        if use_cache is None:
            use_cache = settings.fx_rate_cache_enabled

        if use_cache:
            cached = await self.rate_cache.get_rate(tenant_id, from_currency, to_currency, as_of)
            if cached is not None:
                logger.debug(f"Cache hit for FX rate {from_currency}/{to_currency} on {as_of}")
                return cached

        rate = await self._latest_rate(tenant_id, from_currency, to_currency, as_of)
        if rate is None:
            reverse = await self._latest_rate(tenant_id, to_currency, from_currency, as_of)
            if reverse is not None and reverse > 0:
                rate = round_rate(ONE / reverse)

        if rate is not None and use_cache:
            await self.rate_cache.set_rate(tenant_id, from_currency, to_currency, as_of, rate)
        return rate

    async def record_exchange_rate(
        self,
        tenant_id: uuid.UUID,
        data: ExchangeRateCreate,
    ) -> ExchangeRate:
        """Add a rate, or replace the rate already recorded for that pair and date."""
        if data.rate <= 0:
            raise InvalidAmountException(data.rate, "rate", "Exchange rate must be positive")

        result = await self.db.execute(
            select(ExchangeRate).where(and_(
                ExchangeRate.tenant_id == tenant_id,
                ExchangeRate.from_currency == data.from_currency,
                ExchangeRate.to_currency == data.to_currency,
                ExchangeRate.rate_date == data.rate_date,
            ))
        )
        rate = result.scalar_one_or_none()
        if rate:
            rate.rate = round_rate(data.rate)
            rate.source = data.source
        else:
            rate = ExchangeRate(
                tenant_id=tenant_id,
                from_currency=data.from_currency,
                to_currency=data.to_currency,
                rate=round_rate(data.rate),
                rate_date=data.rate_date,
                source=data.source,
            )
            self.db.add(rate)
        await self.db.flush()

        if settings.fx_rate_cache_enabled:
            await self.rate_cache.invalidate_tenant(tenant_id)
        return rate

    async def list_exchange_rates(
        self,
        tenant_id: uuid.UUID,
        from_currency: Optional[str] = None,
        to_currency: Optional[str] = None,
        limit: int = 100,
    ) -> List[ExchangeRate]:
        query = select(ExchangeRate).where(ExchangeRate.tenant_id == tenant_id)
        if from_currency:
            query = query.where(ExchangeRate.from_currency == from_currency.upper())
        if to_currency:
            query = query.where(ExchangeRate.to_currency == to_currency.upper())
        query = query.order_by(ExchangeRate.rate_date.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # =========================================================================
    # BANK ACCOUNTS
    # =========================================================================

    async def create_bank_account(
        self,
        tenant_id: uuid.UUID,
        data: BankAccountCreate,
    ) -> BankAccount:
        account = BankAccount(
            tenant_id=tenant_id,
            account_name=data.account_name,
            bank_name=data.bank_name,
            account_number=data.account_number,
            currency=data.currency,
            current_balance=round2(data.current_balance),
            original_exchange_rate=data.original_exchange_rate,
            gl_account_id=data.gl_account_id,
            is_active=True,
        )
        self.db.add(account)
        await self.db.flush()
        return account

    async def get_bank_account(self, tenant_id: uuid.UUID, bank_account_id: uuid.UUID) -> BankAccount:
        result = await self.db.execute(
            select(BankAccount).where(
                BankAccount.id == bank_account_id,
                BankAccount.tenant_id == tenant_id,
            )
        )
        account = result.scalar_one_or_none()
        if account is None:
            raise NotFoundException("Bank account", bank_account_id)
        return account

    async def list_bank_accounts(
        self,
        tenant_id: uuid.UUID,
        foreign_only: bool = False,
        include_inactive: bool = False,
    ) -> List[BankAccount]:
        query = select(BankAccount).where(BankAccount.tenant_id == tenant_id)
        if not include_inactive:
            query = query.where(BankAccount.is_active == True)
        if foreign_only:
            query = query.where(BankAccount.currency != settings.home_currency)
        query = query.order_by(BankAccount.account_name)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # =========================================================================
    # REVALUATION
    # =========================================================================

    async def _previous_rate(
        self,
        account: BankAccount,
        month_start: date,
    ) -> Optional[Decimal]:
        """Current rate of the latest revaluation before this month, else the booking rate."""
        result = await self.db.execute(
            select(RevaluationEntry.current_rate)
            .where(and_(
                RevaluationEntry.bank_account_id == account.id,
                RevaluationEntry.revaluation_month < month_start,
            ))
            .order_by(RevaluationEntry.revaluation_month.desc())
            .limit(1)
        )
        rate = result.scalar_one_or_none()
        if rate is not None:
            return rate
        return account.original_exchange_rate

    async def _upsert_entry(
        self,
        tenant_id: uuid.UUID,
        month_start: date,
        line: RevaluationLine,
    ) -> RevaluationEntry:
        result = await self.db.execute(
            select(RevaluationEntry).where(and_(
                RevaluationEntry.bank_account_id == line.bank_account_id,
                RevaluationEntry.revaluation_month == month_start,
            ))
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            entry = RevaluationEntry(
                tenant_id=tenant_id,
                bank_account_id=line.bank_account_id,
                revaluation_month=month_start,
            )
            self.db.add(entry)

        entry.currency = line.currency
        entry.previous_rate = line.previous_rate
        entry.current_rate = line.current_rate
        entry.foreign_balance = line.foreign_balance
        entry.previous_jmd_value = line.previous_jmd_value
        entry.current_jmd_value = line.current_jmd_value
        entry.unrealized_gain_loss = line.unrealized_gain_loss
        return entry

    async def _revalue(
        self,
        tenant_id: uuid.UUID,
        year: int,
        month: int,
        persist: bool,
    ) -> RevaluationSummary:
        month_start, month_end = month_bounds(year, month)
        summary = RevaluationSummary(revaluation_month=month_start, is_preview=not persist)

        for account in await self.list_bank_accounts(tenant_id, foreign_only=True):
            current_rate = await self.get_exchange_rate(
                tenant_id, account.currency, settings.home_currency, month_end,
            )
            if current_rate is None:
                logger.warning(
                    f"No {account.currency}/{settings.home_currency} rate on or before {month_end}; "
                    f"skipping bank account {account.account_name}"
                )
                summary.skipped.append(SkippedAccount(
                    bank_account_id=account.id,
                    account_name=account.account_name,
                    currency=account.currency,
                    reason=SKIP_NO_RATE,
                ))
                continue

            previous_rate = await self._previous_rate(account, month_start)
            if previous_rate is None:
                previous_rate = current_rate

            balance = round2(account.current_balance)
            previous_jmd, current_jmd, gain_loss = revalue_balance(balance, previous_rate, current_rate)
            line = RevaluationLine(
                bank_account_id=account.id,
                account_name=account.account_name,
                currency=account.currency,
                foreign_balance=balance,
                previous_rate=previous_rate,
                current_rate=current_rate,
                previous_jmd_value=previous_jmd,
                current_jmd_value=current_jmd,
                unrealized_gain_loss=gain_loss,
            )
            if persist:
                await self._upsert_entry(tenant_id, month_start, line)

            summary.processed.append(line)
            summary.total_unrealized_gain_loss += gain_loss

        if persist:
            await self.db.flush()
            logger.info(
                f"Revaluation {month_start:%Y-%m} for tenant {tenant_id}: "
                f"{summary.processed_count} revalued, {summary.skipped_count} skipped, "
                f"unrealized {summary.total_unrealized_gain_loss}"
            )
        return summary

    async def revalue_month(self, tenant_id: uuid.UUID, year: int, month: int) -> RevaluationSummary:
        """Revalue every active foreign-currency bank account for the month."""
        return await self._revalue(tenant_id, year, month, persist=True)

    async def preview_revaluation(self, tenant_id: uuid.UUID, year: int, month: int) -> RevaluationSummary:
        """Same computation as revalue_month without writing anything."""
        return await self._revalue(tenant_id, year, month, persist=False)

    async def get_revaluation_history(
        self,
        tenant_id: uuid.UUID,
        bank_account_id: Optional[uuid.UUID] = None,
    ) -> List[RevaluationEntry]:
        query = select(RevaluationEntry).where(RevaluationEntry.tenant_id == tenant_id)
        if bank_account_id:
            query = query.where(RevaluationEntry.bank_account_id == bank_account_id)
        query = query.order_by(RevaluationEntry.revaluation_month.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())
