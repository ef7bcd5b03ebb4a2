"""Addressable input parameters.

Every numeric leaf of ``ProjectInputs`` that the sweep, simulation and
search engines may override is named here, either by an ``InputField``
member or by ``ExpenseAmount(index)`` for expense lines. Reads and writes
go through typed accessors; writes always return a new ``ProjectInputs``.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, Tuple, Union

from .inputs import ProjectInputs, ProjectionSettings, RangedScalar, Scalar


class InputField(str, Enum):
    """Scalar leaves of ``ProjectInputs``, keyed by their dotted path."""

    PURCHASE_PRICE = "financing.purchasePrice"
    DOWN_PAYMENT = "financing.downPayment"
    INTEREST_RATE = "financing.interestRate"
    AMORTIZATION_YEARS = "financing.amortizationYears"
    APPRECIATION_RATE = "financing.annualAppreciationRate"
    MUNICIPAL_ASSESSMENT = "financing.municipalAssessment"
    AVERAGE_DAILY_RATE = "revenue.averageDailyRate"
    OCCUPANCY_RATE = "revenue.occupancyRate"
    DAYS_PER_YEAR = "revenue.daysPerYear"
    TRANSFER_DUTIES = "acquisitionFees.transferDuties"
    NOTARY_FEES = "acquisitionFees.notaryFees"
    OTHER_FEES = "acquisitionFees.other"
    REVENUE_ESCALATION_RATE = "projectionSettings.revenueEscalationRate"
    EXPENSE_ESCALATION_RATE = "projectionSettings.expenseEscalationRate"
    CAPEX_RATE = "projectionSettings.capexRate"
    DISCOUNT_RATE = "projectionSettings.discountRate"
    SALE_COSTS_RATE = "projectionSettings.saleCostsRate"

    @property
    def path(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExpenseAmount:
    """The amount of the expense line at ``index``."""

    index: int

    @property
    def path(self) -> str:
        return f"expenses[{self.index}].amount"


ParameterKey = Union[InputField, ExpenseAmount]


# (section attribute on ProjectInputs, leaf attribute on that section)
_FIELD_LOCATIONS: Dict[InputField, Tuple[str, str]] = {
    InputField.PURCHASE_PRICE: ("financing", "purchase_price"),
    InputField.DOWN_PAYMENT: ("financing", "down_payment"),
    InputField.INTEREST_RATE: ("financing", "interest_rate"),
    InputField.AMORTIZATION_YEARS: ("financing", "amortization_years"),
    InputField.APPRECIATION_RATE: ("financing", "annual_appreciation_rate"),
    InputField.MUNICIPAL_ASSESSMENT: ("financing", "municipal_assessment"),
    InputField.AVERAGE_DAILY_RATE: ("revenue", "average_daily_rate"),
    InputField.OCCUPANCY_RATE: ("revenue", "occupancy_rate"),
    InputField.DAYS_PER_YEAR: ("revenue", "days_per_year"),
    InputField.TRANSFER_DUTIES: ("acquisition_fees", "transfer_duties"),
    InputField.NOTARY_FEES: ("acquisition_fees", "notary_fees"),
    InputField.OTHER_FEES: ("acquisition_fees", "other"),
    InputField.REVENUE_ESCALATION_RATE: ("projection_settings", "revenue_escalation_rate"),
    InputField.EXPENSE_ESCALATION_RATE: ("projection_settings", "expense_escalation_rate"),
    InputField.CAPEX_RATE: ("projection_settings", "capex_rate"),
    InputField.DISCOUNT_RATE: ("projection_settings", "discount_rate"),
    InputField.SALE_COSTS_RATE: ("projection_settings", "sale_costs_rate"),
}

PARAMETER_LABELS: Dict[InputField, str] = {
    InputField.PURCHASE_PRICE: "Purchase price",
    InputField.DOWN_PAYMENT: "Down payment",
    InputField.INTEREST_RATE: "Interest rate",
    InputField.AMORTIZATION_YEARS: "Amortization",
    InputField.APPRECIATION_RATE: "Annual appreciation",
    InputField.MUNICIPAL_ASSESSMENT: "Municipal assessment",
    InputField.AVERAGE_DAILY_RATE: "Average daily rate",
    InputField.OCCUPANCY_RATE: "Occupancy rate",
    InputField.DAYS_PER_YEAR: "Days per year",
    InputField.TRANSFER_DUTIES: "Transfer duties",
    InputField.NOTARY_FEES: "Notary fees",
    InputField.OTHER_FEES: "Other acquisition fees",
    InputField.REVENUE_ESCALATION_RATE: "Revenue escalation",
    InputField.EXPENSE_ESCALATION_RATE: "Expense escalation",
    InputField.CAPEX_RATE: "Capex rate",
    InputField.DISCOUNT_RATE: "Discount rate",
    InputField.SALE_COSTS_RATE: "Sale costs",
}

_EXPENSE_PATH = re.compile(r"^expenses\[(\d+)\]\.amount$")


def parse_parameter(text: str) -> ParameterKey:
    """Turn a dotted path such as ``"expenses[2].amount"`` into a key.

    Raises:
        KeyError: If the path does not name an addressable parameter.
    """
    match = _EXPENSE_PATH.match(text)
    if match:
        return ExpenseAmount(int(match.group(1)))
    try:
        return InputField(text)
    except ValueError:
        raise KeyError(f"Unknown parameter path: {text}") from None


def _section(inputs: ProjectInputs, name: str):
    section = getattr(inputs, name)
    if section is None and name == "projection_settings":
        return ProjectionSettings()
    return section


def _check_expense_index(inputs: ProjectInputs, key: ExpenseAmount) -> None:
    if not 0 <= key.index < len(inputs.expenses):
        raise IndexError(
            f"Expense index {key.index} out of range [0, {len(inputs.expenses) - 1}]"
        )


def get_value(inputs: ProjectInputs, key: ParameterKey) -> float:
    """Read the resolved value of a parameter."""
    if isinstance(key, ExpenseAmount):
        _check_expense_index(inputs, key)
        return inputs.expenses[key.index].amount.resolved

    section_name, attr = _FIELD_LOCATIONS[key]
    leaf = getattr(_section(inputs, section_name), attr)
    if leaf is None:
        return 0.0
    if isinstance(leaf, (Scalar, RangedScalar)):
        return leaf.resolved
    return float(leaf)


def _overridden(leaf, value: float):
    if isinstance(leaf, (Scalar, RangedScalar)):
        return leaf.with_value(value)
    if isinstance(leaf, int):
        return int(round(value))
    return Scalar(value)


def set_value(inputs: ProjectInputs, key: ParameterKey, value: float) -> ProjectInputs:
    """Return a copy of ``inputs`` with one parameter overridden.

    Ranged inputs keep their range; the override becomes the value the
    calculations read.
    """
    if isinstance(key, ExpenseAmount):
        _check_expense_index(inputs, key)
        expenses = list(inputs.expenses)
        line = expenses[key.index]
        expenses[key.index] = replace(line, amount=line.amount.with_value(value))
        return replace(inputs, expenses=tuple(expenses))

    section_name, attr = _FIELD_LOCATIONS[key]
    section = _section(inputs, section_name)
    new_section = replace(section, **{attr: _overridden(getattr(section, attr), value)})
    return replace(inputs, **{section_name: new_section})


def applied_value(inputs: ProjectInputs, key: ParameterKey, value: float) -> float:
    """The value a parameter actually takes when overridden with ``value``.

    Whole-number inputs such as days per year round the override.
    """
    return get_value(set_value(inputs, key, value), key)


def parameter_label(key: ParameterKey, inputs: ProjectInputs = None) -> str:
    """Display label of a parameter (expense lines use their own name)."""
    if isinstance(key, ExpenseAmount):
        if inputs is not None and 0 <= key.index < len(inputs.expenses):
            return inputs.expenses[key.index].name
        return key.path
    return PARAMETER_LABELS[key]


def iter_ranged_parameters(inputs: ProjectInputs) -> Iterator[Tuple[ParameterKey, RangedScalar]]:
    """Yield every parameter whose range is enabled, in declaration order."""
    for key, (section_name, attr) in _FIELD_LOCATIONS.items():
        section = getattr(inputs, section_name)
        if section is None:
            continue
        leaf = getattr(section, attr)
        if isinstance(leaf, RangedScalar) and leaf.enabled:
            yield key, leaf

    for index, line in enumerate(inputs.expenses):
        if isinstance(line.amount, RangedScalar) and line.amount.enabled:
            yield ExpenseAmount(index), line.amount
