"""Property report model and presentation helpers."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date


def format_currency(value: float | int) -> str:
    """Format an amount as whole US dollars."""

    rounded = int(round(value))
    if rounded < 0:
        return f"-${abs(rounded):,}"
    return f"${rounded:,}"


def format_percentage(value: float | int) -> str:
    """Format a percentage figure with one decimal place."""

    return f"{value:.1f}%"


@dataclass(frozen=True)
class Lien:
    type: str
    amount: int
    priority: int


@dataclass(frozen=True)
class PropertySize:
    bedrooms: int
    bathrooms: float
    square_feet: int
    lot_size: str


@dataclass(frozen=True)
class RentalPotential:
    monthly_rent: int
    annual_rent: int
    cap_rate: float
    cash_flow: int


@dataclass(frozen=True)
class Neighborhood:
    crime_rate: str
    school_rating: float
    walk_score: int
    transit_score: int


@dataclass(frozen=True)
class InvestmentMetrics:
    roi: float
    cash_on_cash_return: float
    gross_rent_multiplier: float
    break_even_ratio: float


@dataclass(frozen=True)
class ComparableSale:
    address: str
    sale_price: int
    sale_date: date
    price_per_sq_ft: int


@dataclass(frozen=True)
class PropertyReport:
    """Everything shown on the report page for one searched address."""

    address: str
    market_value: int
    after_reform_value: int
    mortgage_balance: int
    monthly_payment: int
    interest_rate: float
    debt_amount: int
    liens: tuple[Lien, ...]
    property_size: PropertySize
    rental_potential: RentalPotential
    neighborhood: Neighborhood
    investment_metrics: InvestmentMetrics
    recent_sales: tuple[ComparableSale, ...]

    @property
    def lien_total(self) -> int:
        return sum(lien.amount for lien in self.liens)

    @property
    def equity(self) -> int:
        return self.market_value - self.mortgage_balance - self.debt_amount

    def to_dict(self) -> dict[str, object]:
        """Return raw figures plus display strings for templates and JSON."""

        data = asdict(self)
        data["liens"] = [
            {**lien, "amount_display": format_currency(lien["amount"])}
            for lien in sorted(data["liens"], key=lambda lien: lien["priority"])
        ]
        data["recent_sales"] = [
            {
                **sale,
                "sale_date": sale["sale_date"].isoformat(),
                "sale_price_display": format_currency(sale["sale_price"]),
                "price_per_sq_ft_display": format_currency(sale["price_per_sq_ft"]),
            }
            for sale in data["recent_sales"]
        ]
        rental = self.rental_potential
        metrics = self.investment_metrics
        data["display"] = {
            "market_value": format_currency(self.market_value),
            "after_reform_value": format_currency(self.after_reform_value),
            "mortgage_balance": format_currency(self.mortgage_balance),
            "monthly_payment": format_currency(self.monthly_payment),
            "interest_rate": format_percentage(self.interest_rate),
            "debt_amount": format_currency(self.debt_amount),
            "lien_total": format_currency(self.lien_total),
            "equity": format_currency(self.equity),
            "monthly_rent": format_currency(rental.monthly_rent),
            "annual_rent": format_currency(rental.annual_rent),
            "cap_rate": format_percentage(rental.cap_rate),
            "cash_flow": format_currency(rental.cash_flow),
            "roi": format_percentage(metrics.roi),
            "cash_on_cash_return": format_percentage(metrics.cash_on_cash_return),
            "gross_rent_multiplier": f"{metrics.gross_rent_multiplier:.1f}",
            "break_even_ratio": f"{metrics.break_even_ratio:.2f}",
        }
        data["recommendation"] = build_recommendation(self)
        return data


def build_recommendation(report: PropertyReport) -> dict[str, str]:
    """Summarize the investment case in a headline and one paragraph."""

    cash_flow = report.rental_potential.cash_flow
    roi = report.investment_metrics.roi

    if cash_flow > 0 and roi >= 10:
        tone = "strong"
        headline = "Strong Investment Opportunity"
        summary = (
            f"This property shows excellent potential with a {format_percentage(roi)} ROI"
            f" and positive cash flow of {format_currency(cash_flow)} per month. The"
            f" after-reform value of {format_currency(report.after_reform_value)}"
            " represents significant upside potential."
        )
    elif cash_flow > 0:
        tone = "moderate"
        headline = "Moderate Investment Opportunity"
        summary = (
            f"Cash flow stays positive at {format_currency(cash_flow)} per month, but the"
            f" {format_percentage(roi)} ROI leaves a thin margin. Review renovation costs"
            " before committing."
        )
    else:
        tone = "caution"
        headline = "Proceed with Caution"
        summary = (
            f"Projected cash flow of {format_currency(cash_flow)} per month does not cover"
            " carrying costs. Consider negotiating the price or paying down the"
            f" {format_currency(report.debt_amount)} in outstanding liens first."
        )

    return {"tone": tone, "headline": headline, "summary": summary}
