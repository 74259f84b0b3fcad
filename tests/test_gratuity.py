"""
Ledger Engine - Gratuity Tests

Statutory termination gratuity and the special payroll run that pays it.
"""

import pytest
from datetime import date
from decimal import Decimal

from ledger_engine.models.payroll import (
    PayFrequency,
    PayrollRunStatus,
    PayrollRunType,
    TerminationReason,
)
from ledger_engine.schemas.payroll import EmployeeCreate, GratuityRequest
from ledger_engine.services.payroll_service import PayrollService
from ledger_engine.services.tax_calculators.gratuity import GratuityCalculator, completed_years
from ledger_engine.utils.error_handling import BusinessRuleException, DuplicateEntryException, ErrorCode


HIRE_DATE = date(2020, 6, 15)
MONTHLY_SALARY = Decimal("433300.00")  # weekly rate of exactly 100,000


class TestServiceYears:
    """Test completed-year counting."""

    def test_day_before_anniversary(self):
        assert completed_years(HIRE_DATE, date(2023, 6, 14)) == 2

    def test_on_anniversary(self):
        assert completed_years(HIRE_DATE, date(2023, 6, 15)) == 3

    def test_end_before_start(self):
        assert completed_years(HIRE_DATE, date(2019, 1, 1)) == 0


class TestGratuityCalculator:
    """Test the gratuity formula and eligibility rules."""

    def test_two_weeks_per_year(self):
        result = GratuityCalculator.calculate(
            MONTHLY_SALARY, PayFrequency.MONTHLY, HIRE_DATE, date(2023, 7, 1), TerminationReason.REDUNDANCY,
        )
        assert result.eligible
        assert result.weekly_rate == Decimal("100000.00")
        assert result.weeks_entitled == 6
        assert result.amount == Decimal("600000.00")

    def test_service_capped_at_five_years(self):
        result = GratuityCalculator.calculate(
            MONTHLY_SALARY, PayFrequency.MONTHLY, HIRE_DATE, date(2027, 7, 1), TerminationReason.RETIREMENT,
        )
        assert result.years_of_service == 7
        assert result.capped_years == 5
        assert result.amount == Decimal("1000000.00")
        assert "capped at 5" in result.breakdown

    def test_weekly_and_biweekly_pay(self):
        weekly = GratuityCalculator.calculate(
            Decimal("20000.00"), PayFrequency.WEEKLY, HIRE_DATE, date(2021, 7, 1), TerminationReason.TERMINATION,
        )
        biweekly = GratuityCalculator.calculate(
            Decimal("40000.00"), PayFrequency.BIWEEKLY, HIRE_DATE, date(2021, 7, 1), TerminationReason.TERMINATION,
        )
        assert weekly.amount == biweekly.amount == Decimal("40000.00")

    @pytest.mark.parametrize("reason", [TerminationReason.REDUNDANCY, TerminationReason.RESIGNATION])
    def test_minimum_service_for_redundancy_and_resignation(self, reason):
        result = GratuityCalculator.calculate(
            MONTHLY_SALARY, PayFrequency.MONTHLY, HIRE_DATE, date(2021, 7, 1), reason,
        )
        assert not result.eligible
        assert result.amount == Decimal("0.00")
        assert "at least 2 years" in result.ineligible_reason

    def test_one_year_enough_for_termination(self):
        result = GratuityCalculator.calculate(
            MONTHLY_SALARY, PayFrequency.MONTHLY, HIRE_DATE, date(2021, 7, 1), TerminationReason.TERMINATION,
        )
        assert result.eligible
        assert result.amount == Decimal("200000.00")

    def test_less_than_one_year(self):
        result = GratuityCalculator.calculate(
            MONTHLY_SALARY, PayFrequency.MONTHLY, HIRE_DATE, date(2021, 6, 14), TerminationReason.TERMINATION,
        )
        assert not result.eligible
        assert result.years_of_service == 0

    def test_termination_before_hire(self):
        result = GratuityCalculator.calculate(
            MONTHLY_SALARY, PayFrequency.MONTHLY, HIRE_DATE, date(2020, 1, 1), TerminationReason.ESTIMATE,
        )
        assert not result.eligible

    def test_annual_accrual(self):
        assert GratuityCalculator.estimate_annual_accrual(
            MONTHLY_SALARY, PayFrequency.MONTHLY, 2,
        ) == Decimal("200000.00")
        assert GratuityCalculator.estimate_annual_accrual(
            MONTHLY_SALARY, PayFrequency.MONTHLY, 5,
        ) == Decimal("0.00")


class TestGratuityProcessing:
    """Test paying gratuity through the payroll service."""

    async def _hire(self, db_session, tenant_id):
        return await PayrollService(db_session).create_employee(tenant_id, EmployeeCreate(
            employee_number="EMP-014",
            first_name="Marcia",
            last_name="Campbell",
            hire_date=HIRE_DATE,
            base_salary=MONTHLY_SALARY,
        ))

    @pytest.mark.asyncio
    async def test_estimate_changes_nothing(self, db_session, tenant_id):
        service = PayrollService(db_session)
        employee = await self._hire(db_session, tenant_id)

        result = await service.estimate_gratuity(
            tenant_id, employee.id, GratuityRequest(termination_date=date(2024, 1, 31)),
        )
        assert result.amount == Decimal("600000.00")
        assert employee.is_active

    @pytest.mark.asyncio
    async def test_redundancy_paid_through_special_run(self, db_session, tenant_id, user_id):
        service = PayrollService(db_session)
        employee = await self._hire(db_session, tenant_id)

        result, run = await service.process_gratuity(
            tenant_id,
            employee.id,
            GratuityRequest(termination_date=date(2024, 1, 31), reason=TerminationReason.REDUNDANCY),
            user_id,
        )

        assert run.run_number == "PR-00001"
        assert run.run_type == PayrollRunType.SPECIAL
        assert run.status == PayrollRunStatus.PROCESSED
        assert run.total_gross == run.total_net == result.amount == Decimal("600000.00")
        [entry] = run.entries
        assert entry.is_tax_exempt
        assert entry.paye == entry.nis == entry.nht == entry.education_tax == Decimal("0.00")

        assert not employee.is_active
        assert employee.termination_reason == TerminationReason.REDUNDANCY
        assert employee.termination_date == date(2024, 1, 31)

    @pytest.mark.asyncio
    async def test_retirement_keeps_employee_active(self, db_session, tenant_id):
        service = PayrollService(db_session)
        employee = await self._hire(db_session, tenant_id)

        await service.process_gratuity(
            tenant_id,
            employee.id,
            GratuityRequest(termination_date=date(2024, 1, 31), reason=TerminationReason.RETIREMENT),
        )
        assert employee.is_active

    @pytest.mark.asyncio
    async def test_estimate_reason_cannot_be_processed(self, db_session, tenant_id):
        employee = await self._hire(db_session, tenant_id)
        with pytest.raises(BusinessRuleException) as exc_info:
            await PayrollService(db_session).process_gratuity(
                tenant_id, employee.id, GratuityRequest(termination_date=date(2024, 1, 31)),
            )
        assert exc_info.value.code == ErrorCode.NOT_ELIGIBLE

    @pytest.mark.asyncio
    async def test_ineligible_cannot_be_processed(self, db_session, tenant_id):
        employee = await self._hire(db_session, tenant_id)
        with pytest.raises(BusinessRuleException):
            await PayrollService(db_session).process_gratuity(
                tenant_id,
                employee.id,
                GratuityRequest(termination_date=date(2021, 7, 1), reason=TerminationReason.REDUNDANCY),
            )
        assert employee.is_active

    @pytest.mark.asyncio
    async def test_duplicate_employee_number(self, db_session, tenant_id):
        await self._hire(db_session, tenant_id)
        with pytest.raises(DuplicateEntryException):
            await self._hire(db_session, tenant_id)
