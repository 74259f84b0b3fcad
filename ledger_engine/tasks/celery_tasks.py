"""
Ledger Engine - Celery Tasks

Background tasks for scheduled ledger operations. Each tenant is processed
in its own transaction so one failing tenant does not block the others.
"""

import asyncio
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from celery import shared_task
from dateutil.relativedelta import relativedelta
from sqlalchemy import select

from ledger_engine.database import unit_of_work

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper to run async functions in Celery tasks."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def previous_month(today: date) -> Tuple[int, int]:
    """(year, month) of the calendar month before today."""
    last_month = today - relativedelta(months=1)
    return last_month.year, last_month.month


async def _tenant_ids(tenant_id: Optional[str] = None) -> List[uuid.UUID]:
    """Tenants with a chart of accounts, or just the one requested."""
    if tenant_id:
        return [uuid.UUID(tenant_id)]

    from ledger_engine.models.accounting import GLAccount

    async with unit_of_work() as db:
        result = await db.execute(select(GLAccount.tenant_id).distinct())
        return list(result.scalars().all())


# ===========================================
# FX REVALUATION
# ===========================================

@shared_task(name='ledger_engine.tasks.celery_tasks.monthly_fx_revaluation_task')
def monthly_fx_revaluation_task(
    year: Optional[int] = None,
    month: Optional[int] = None,
    tenant_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Revalue foreign-currency bank balances; defaults to the previous month."""
    if year is None or month is None:
        year, month = previous_month(date.today())
    return run_async(_monthly_fx_revaluation(year, month, tenant_id))


async def _monthly_fx_revaluation(year: int, month: int, tenant_id: Optional[str]) -> Dict[str, Any]:
    from ledger_engine.services.fx_service import FXService

    tenants = await _tenant_ids(tenant_id)
    processed = 0
    skipped = 0
    failed = []

    for tenant in tenants:
        try:
            async with unit_of_work() as db:
                summary = await FXService(db).revalue_month(tenant, year, month)
            processed += summary.processed_count
            skipped += summary.skipped_count
        except Exception as e:
            logger.error(f"FX revaluation {year}-{month:02d} failed for tenant {tenant}: {e}")
            failed.append(str(tenant))

    logger.info(
        f"FX revaluation {year}-{month:02d}: {len(tenants)} tenants, "
        f"{processed} accounts revalued, {skipped} skipped, {len(failed)} failed"
    )
    return {
        "period": f"{year}-{month:02d}",
        "tenants": len(tenants),
        "accounts_revalued": processed,
        "accounts_skipped": skipped,
        "failed_tenants": failed,
    }


# ===========================================
# DEPRECIATION
# ===========================================

@shared_task(name='ledger_engine.tasks.celery_tasks.annual_depreciation_task')
def annual_depreciation_task(
    fiscal_year: Optional[int] = None,
    tenant_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Run depreciation and capital allowances; defaults to last fiscal year."""
    if fiscal_year is None:
        fiscal_year = date.today().year - 1
    return run_async(_annual_depreciation(fiscal_year, tenant_id))


async def _annual_depreciation(fiscal_year: int, tenant_id: Optional[str]) -> Dict[str, Any]:
    from ledger_engine.services.fixed_asset_service import FixedAssetService

    tenants = await _tenant_ids(tenant_id)
    assets_processed = 0
    assets_skipped = 0
    failed = []

    for tenant in tenants:
        try:
            async with unit_of_work() as db:
                result = await FixedAssetService(db).run_depreciation(tenant, fiscal_year)
            assets_processed += result["processed_count"]
            assets_skipped += result["skipped_count"]
        except Exception as e:
            logger.error(f"Depreciation run {fiscal_year} failed for tenant {tenant}: {e}")
            failed.append(str(tenant))

    logger.info(
        f"Depreciation run {fiscal_year}: {len(tenants)} tenants, "
        f"{assets_processed} assets processed, {assets_skipped} skipped"
    )
    return {
        "fiscal_year": fiscal_year,
        "tenants": len(tenants),
        "assets_processed": assets_processed,
        "assets_skipped": assets_skipped,
        "failed_tenants": failed,
    }


# ===========================================
# LEDGER INTEGRITY
# ===========================================

@shared_task(name='ledger_engine.tasks.celery_tasks.verify_account_balances_task')
def verify_account_balances_task(tenant_id: Optional[str] = None) -> Dict[str, Any]:
    """Compare stored account balances with the sum of posted lines."""
    return run_async(_verify_account_balances(tenant_id))


async def _verify_account_balances(tenant_id: Optional[str]) -> Dict[str, Any]:
    from ledger_engine.services.accounting_service import AccountingService

    tenants = await _tenant_ids(tenant_id)
    inconsistent = {}

    for tenant in tenants:
        async with unit_of_work() as db:
            report = await AccountingService(db).verify_account_balances(tenant)
        if not report.is_consistent:
            codes = [d.account_code for d in report.discrepancies]
            logger.warning(f"Balance mismatch for tenant {tenant} on accounts {', '.join(codes)}")
            inconsistent[str(tenant)] = codes

    return {
        "tenants_checked": len(tenants),
        "inconsistent_tenants": inconsistent,
    }
