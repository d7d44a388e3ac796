"""Report data providers.

The page flow only depends on ``ReportProvider.generate``; swapping in a
provider backed by a real data vendor does not touch the routes.
"""
from __future__ import annotations

import hashlib
import random
import re
from datetime import date, timedelta
from typing import Optional

from flask import current_app

from .services import (
    ComparableSale,
    InvestmentMetrics,
    Lien,
    Neighborhood,
    PropertyReport,
    PropertySize,
    RentalPotential,
)

_STREET_PATTERN = re.compile(r"^\s*(\d+)\s+([^,]+)")

LIEN_TYPES = (
    "Property Tax Lien",
    "HOA Lien",
    "Mechanics Lien",
    "Judgment Lien",
    "IRS Tax Lien",
)
CRIME_RATES = ("Low", "Moderate", "High")
OPERATING_EXPENSE_RATIO = 0.35


class ReportProvider:
    """Produce a property report for an address."""

    name = "base"

    def generate(self, address: str) -> PropertyReport:
        raise NotImplementedError


class SampleReportProvider(ReportProvider):
    """Fixed sample figures, whatever the address."""

    name = "sample"

    def generate(self, address: str) -> PropertyReport:
        return PropertyReport(
            address=address,
            market_value=485000,
            after_reform_value=625000,
            mortgage_balance=320000,
            monthly_payment=1850,
            interest_rate=6.5,
            debt_amount=45000,
            liens=(
                Lien(type="Property Tax Lien", amount=8500, priority=1),
                Lien(type="HOA Lien", amount=3200, priority=2),
                Lien(type="Mechanics Lien", amount=12000, priority=3),
            ),
            property_size=PropertySize(
                bedrooms=3, bathrooms=2, square_feet=1850, lot_size="0.25 acres"
            ),
            rental_potential=RentalPotential(
                monthly_rent=3200, annual_rent=38400, cap_rate=7.9, cash_flow=1350
            ),
            neighborhood=Neighborhood(
                crime_rate="Low", school_rating=8.5, walk_score=78, transit_score=65
            ),
            investment_metrics=InvestmentMetrics(
                roi=12.3,
                cash_on_cash_return=18.7,
                gross_rent_multiplier=12.6,
                break_even_ratio=0.58,
            ),
            recent_sales=(
                ComparableSale("125 Main St", 465000, date(2024, 1, 15), 251),
                ComparableSale("127 Main St", 498000, date(2024, 2, 3), 269),
                ComparableSale("129 Main St", 472000, date(2024, 1, 28), 255),
            ),
        )


def _round_to(value: float, step: int) -> int:
    return int(round(value / step) * step)


def _amortized_payment(principal: int, annual_rate: float, months: int = 360) -> float:
    """Monthly payment of a fixed-rate loan."""

    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return principal / months
    factor = (1 + monthly_rate) ** months
    return principal * monthly_rate * factor / (factor - 1)


def _address_seed(address: str) -> int:
    normalized = " ".join(address.lower().split())
    digest = hashlib.sha256(normalized.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


class SeededReportProvider(ReportProvider):
    """Deterministic mock figures derived from the address text.

    The same address (ignoring case and spacing) always yields the same
    report for a given ``as_of`` date, and the figures agree with each other.
    """

    name = "seeded"

    def __init__(self, as_of: Optional[date] = None) -> None:
        self.as_of = as_of

    def generate(self, address: str) -> PropertyReport:
        rng = random.Random(_address_seed(address))
        as_of = self.as_of or date.today()

        market_value = rng.randrange(180_000, 950_001, 5_000)
        after_reform_value = _round_to(market_value * rng.uniform(1.12, 1.40), 5_000)
        mortgage_balance = _round_to(market_value * rng.uniform(0.35, 0.80), 1_000)
        interest_rate = round(rng.uniform(4.5, 7.5), 1)
        monthly_payment = int(round(_amortized_payment(mortgage_balance, interest_rate)))

        lien_types = rng.sample(LIEN_TYPES, rng.randint(0, 3))
        liens = tuple(
            Lien(type=lien_type, amount=rng.randrange(1_500, 15_001, 100), priority=index)
            for index, lien_type in enumerate(lien_types, start=1)
        )
        debt_amount = sum(lien.amount for lien in liens)

        square_feet = rng.randrange(900, 3_601, 10)
        property_size = PropertySize(
            bedrooms=rng.randint(2, 5),
            bathrooms=rng.choice((1, 1.5, 2, 2.5, 3)),
            square_feet=square_feet,
            lot_size=f"{rng.choice((0.1, 0.15, 0.2, 0.25, 0.33, 0.5)):.2f} acres",
        )

        monthly_rent = _round_to(market_value * rng.uniform(0.0055, 0.0085), 50)
        annual_rent = monthly_rent * 12
        operating_expenses = annual_rent * OPERATING_EXPENSE_RATIO
        net_operating_income = annual_rent - operating_expenses
        cash_flow = int(round(monthly_rent - monthly_payment - operating_expenses / 12))
        cash_invested = max(market_value - mortgage_balance, 1)

        rental_potential = RentalPotential(
            monthly_rent=monthly_rent,
            annual_rent=annual_rent,
            cap_rate=round(net_operating_income / market_value * 100, 1),
            cash_flow=cash_flow,
        )
        investment_metrics = InvestmentMetrics(
            roi=round(
                (cash_flow * 12 + (after_reform_value - market_value) * 0.1)
                / cash_invested
                * 100,
                1,
            ),
            cash_on_cash_return=round(cash_flow * 12 / cash_invested * 100, 1),
            gross_rent_multiplier=round(market_value / annual_rent, 1),
            break_even_ratio=round((monthly_payment * 12 + operating_expenses) / annual_rent, 2),
        )
        neighborhood = Neighborhood(
            crime_rate=rng.choice(CRIME_RATES),
            school_rating=round(rng.uniform(4.0, 10.0), 1),
            walk_score=rng.randint(20, 98),
            transit_score=rng.randint(10, 95),
        )

        match = _STREET_PATTERN.match(address)
        if match:
            house_number, street = int(match.group(1)), match.group(2).strip()
        else:
            house_number, street = rng.randint(100, 999), "Main St"

        recent_sales = []
        for offset in (2, 4, 6):
            sale_price = _round_to(market_value * rng.uniform(0.92, 1.08), 1_000)
            recent_sales.append(
                ComparableSale(
                    address=f"{house_number + offset} {street}",
                    sale_price=sale_price,
                    sale_date=as_of - timedelta(days=rng.randint(14, 180)),
                    price_per_sq_ft=int(round(sale_price / square_feet * rng.uniform(0.95, 1.05))),
                )
            )

        return PropertyReport(
            address=address,
            market_value=market_value,
            after_reform_value=after_reform_value,
            mortgage_balance=mortgage_balance,
            monthly_payment=monthly_payment,
            interest_rate=interest_rate,
            debt_amount=debt_amount,
            liens=liens,
            property_size=property_size,
            rental_potential=rental_potential,
            neighborhood=neighborhood,
            investment_metrics=investment_metrics,
            recent_sales=tuple(recent_sales),
        )


PROVIDERS: dict[str, type[ReportProvider]] = {
    SampleReportProvider.name: SampleReportProvider,
    SeededReportProvider.name: SeededReportProvider,
}


def build_provider(name: str) -> ReportProvider:
    """Instantiate the provider registered under ``name``."""

    provider_class = PROVIDERS.get((name or "").strip().lower())
    if provider_class is None:
        raise ValueError(f"Unsupported report provider '{name}'")
    return provider_class()


def init_app(app) -> None:
    """Attach the configured provider to the application."""

    app.extensions["report_provider"] = build_provider(app.config.get("REPORT_PROVIDER", "sample"))


def get_report_provider() -> ReportProvider:
    return current_app.extensions["report_provider"]
