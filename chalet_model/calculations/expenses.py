"""Operating expense totals for the first year and for projection years."""

from dataclasses import dataclass
from typing import Dict, Sequence

from ..models.inputs import ExpenseCategory, ExpenseLine, ExpenseType
from .utils import round2


@dataclass(frozen=True)
class ExpenseBreakdown:
    """First-year expenses with a per-category split."""

    total: float
    by_category: Dict[str, float]
    by_line: Dict[str, float]


def annual_expense_amount(
    line: ExpenseLine,
    annual_revenue: float,
    property_value: float,
    expense_factor: float = 1.0,
) -> float:
    """Yearly dollar amount of one expense line.

    Fixed lines carry the escalation factor. Percentage lines are taken of
    revenue or property value as passed in, which already include their own
    growth, so they are not escalated a second time.

    Args:
        line: The expense line.
        annual_revenue: Revenue for the year being costed.
        property_value: Property value for the year being costed.
        expense_factor: (1 + expense escalation)^(year - 1).

    Returns:
        Unrounded annual amount.
    """
    amount = line.amount.resolved

    if line.type == ExpenseType.FIXED_ANNUAL:
        return amount * expense_factor
    elif line.type == ExpenseType.FIXED_MONTHLY:
        return amount * 12 * expense_factor
    elif line.type == ExpenseType.PERCENTAGE_REVENUE:
        return annual_revenue * amount / 100
    elif line.type == ExpenseType.PERCENTAGE_PROPERTY_VALUE:
        return property_value * amount / 100
    raise ValueError(f"Unknown expense type: {line.type}")


def calculate_expenses(
    expense_lines: Sequence[ExpenseLine],
    annual_revenue: float,
    property_value: float,
) -> ExpenseBreakdown:
    """First-year expenses, grouped by category.

    Each line is rounded before summing so the breakdown adds up to the total.
    """
    total = 0.0
    by_category: Dict[str, float] = {}
    by_line: Dict[str, float] = {}

    for line in expense_lines:
        amount = round2(annual_expense_amount(line, annual_revenue, property_value))
        total += amount

        category = (line.category or ExpenseCategory.OTHER).value
        by_category[category] = round2(by_category.get(category, 0.0) + amount)
        by_line[line.name] = round2(by_line.get(line.name, 0.0) + amount)

    return ExpenseBreakdown(total=round2(total), by_category=by_category, by_line=by_line)


def calculate_expenses_for_year(
    expense_lines: Sequence[ExpenseLine],
    year: int,
    annual_revenue: float,
    property_value: float,
    expense_escalation_rate: float,
) -> float:
    """Total expenses for projection year ``year`` (1-indexed).

    Args:
        expense_lines: Expense lines from the inputs.
        year: Projection year, 1 for the first year.
        annual_revenue: That year's escalated revenue.
        property_value: That year's appreciated property value.
        expense_escalation_rate: Annual escalation of fixed lines, in percent.

    Returns:
        Total rounded to cents.
    """
    expense_factor = (1 + expense_escalation_rate / 100) ** (year - 1)

    total = 0.0
    for line in expense_lines:
        total += round2(annual_expense_amount(line, annual_revenue, property_value, expense_factor))

    return round2(total)
