"""
Ledger Engine - Termination Gratuity Calculator

Jamaica Employment (Termination and Redundancy Payments) Act:
- Two weeks' basic pay per completed year of service
- Service credited up to 5 years (10 weeks' pay at most)
- Redundancy pay requires at least 2 years of service

The payment is tax-exempt; PAYE, NIS, NHT and education tax are not withheld.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from ledger_engine.models.payroll import PayFrequency, TerminationReason
from ledger_engine.utils.money import ZERO, round2, to_decimal


WEEKS_PER_YEAR_OF_SERVICE = 2
MAX_YEARS_OF_SERVICE = 5
MIN_YEARS_FOR_REDUNDANCY = 2

WEEKS_PER_PERIOD = {
    PayFrequency.WEEKLY: Decimal("1"),
    PayFrequency.BIWEEKLY: Decimal("2"),
    PayFrequency.MONTHLY: Decimal("4.333"),
}

# Reasons that need MIN_YEARS_FOR_REDUNDANCY years of service
MINIMUM_SERVICE_REASONS = frozenset({
    TerminationReason.REDUNDANCY,
    TerminationReason.RESIGNATION,
})


@dataclass
class GratuityResult:
    eligible: bool
    years_of_service: int
    capped_years: int
    weekly_rate: Decimal
    weeks_entitled: int
    amount: Decimal
    ineligible_reason: Optional[str] = None

    @property
    def breakdown(self) -> str:
        if not self.eligible:
            return self.ineligible_reason or "Not eligible"
        capped = f" (capped at {MAX_YEARS_OF_SERVICE})" if self.years_of_service > MAX_YEARS_OF_SERVICE else ""
        return (
            f"Service: {self.years_of_service} years{capped} | "
            f"Weekly rate: J${self.weekly_rate:,} | "
            f"Weeks entitled: {self.weeks_entitled} | "
            f"Gratuity: J${self.amount:,}"
        )


def completed_years(start: date, end: date) -> int:
    """Whole anniversaries between two dates (0 if end is before start)."""
    if end < start:
        return 0
    return relativedelta(end, start).years


class GratuityCalculator:
    """Statutory gratuity. Pure, no database access."""

    @staticmethod
    def weekly_rate(base_salary: Decimal, frequency: PayFrequency) -> Decimal:
        divisor = WEEKS_PER_PERIOD[PayFrequency(frequency)]
        return round2(to_decimal(base_salary) / divisor)

    @staticmethod
    def calculate(
        base_salary: Decimal,
        frequency: PayFrequency,
        hire_date: date,
        as_of_date: date,
        reason: TerminationReason,
    ) -> GratuityResult:
        """
        Gratuity = weekly rate x 2 x min(completed years, 5).

        Ineligible results carry a reason and a zero amount.
        """
        reason = TerminationReason(reason)
        weekly = GratuityCalculator.weekly_rate(base_salary, frequency)

        def ineligible(years: int, message: str) -> GratuityResult:
            return GratuityResult(
                eligible=False,
                years_of_service=years,
                capped_years=0,
                weekly_rate=weekly,
                weeks_entitled=0,
                amount=ZERO,
                ineligible_reason=message,
            )

        if as_of_date < hire_date:
            return ineligible(0, "Termination date is before hire date")

        years = completed_years(hire_date, as_of_date)
        if years == 0:
            return ineligible(0, "Less than one completed year of service")

        if reason in MINIMUM_SERVICE_REASONS and years < MIN_YEARS_FOR_REDUNDANCY:
            return ineligible(
                years,
                f"{reason.value.capitalize()} requires at least {MIN_YEARS_FOR_REDUNDANCY} "
                f"years of service. Employee has {years}.",
            )

        capped = min(years, MAX_YEARS_OF_SERVICE)
        weeks = capped * WEEKS_PER_YEAR_OF_SERVICE

        return GratuityResult(
            eligible=True,
            years_of_service=years,
            capped_years=capped,
            weekly_rate=weekly,
            weeks_entitled=weeks,
            amount=round2(weekly * weeks),
        )

    @staticmethod
    def estimate_annual_accrual(
        base_salary: Decimal,
        frequency: PayFrequency,
        years_of_service: int,
    ) -> Decimal:
        """Provision to accrue for the coming year; nothing once service is capped."""
        if years_of_service >= MAX_YEARS_OF_SERVICE:
            return ZERO
        return round2(GratuityCalculator.weekly_rate(base_salary, frequency) * WEEKS_PER_YEAR_OF_SERVICE)
