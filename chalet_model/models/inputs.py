"""Input data model for a short-term rental property investment.

Every numeric input is either a plain ``Scalar`` or a ``RangedScalar`` that
carries a sweepable range. Raw numbers and legacy ``{"value", "range"}``
mappings are normalized once, when the records are built, so calculations
only ever read ``.resolved``.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from .lookups import DEFAULT_DAYS_PER_YEAR, DEFAULT_PROJECTION_SETTINGS


@dataclass(frozen=True)
class SourceInfo:
    """Where an assumption came from."""

    source: str = ""  # URL, document, broker quote...
    remarks: str = ""


@dataclass(frozen=True)
class Scalar:
    """A fixed input value."""

    value: float
    source_info: Optional[SourceInfo] = None

    @property
    def resolved(self) -> float:
        """Value read by the calculations."""
        return self.value

    def with_value(self, value: float) -> "Scalar":
        return replace(self, value=value)


@dataclass(frozen=True)
class RangedScalar:
    """An input value paired with a [min, max] range.

    When the range is enabled the calculations read ``default``; otherwise
    they read ``value``. The range itself feeds Monte Carlo sampling.
    """

    value: float
    min_value: float
    max_value: float
    default: float
    enabled: bool = True
    source_info: Optional[SourceInfo] = None

    @property
    def resolved(self) -> float:
        """Value read by the calculations."""
        return self.default if self.enabled else self.value

    def with_value(self, value: float) -> "RangedScalar":
        """Override the value so that ``resolved`` returns it."""
        if self.enabled:
            return replace(self, value=value, default=value)
        return replace(self, value=value)


InputValue = Union[Scalar, RangedScalar]


def as_input(raw: Any) -> InputValue:
    """Normalize a raw input into a ``Scalar`` or ``RangedScalar``.

    Accepts plain numbers, already-normalized values, and mappings shaped
    like ``{"value": 200, "range": {"min": 150, "max": 250,
    "default": 200, "useRange": True}}``.

    Raises:
        TypeError: If the value cannot be interpreted as a numeric input.
    """
    if isinstance(raw, (Scalar, RangedScalar)):
        return raw
    if isinstance(raw, bool):
        raise TypeError("Boolean is not a numeric input")
    if isinstance(raw, (int, float)):
        return Scalar(float(raw))
    if isinstance(raw, Mapping) and "value" in raw:
        source_info = None
        raw_source = raw.get("sourceInfo") or raw.get("source_info")
        if raw_source:
            source_info = SourceInfo(
                source=raw_source.get("source", ""),
                remarks=raw_source.get("remarks", ""),
            )

        raw_range = raw.get("range")
        if not raw_range:
            return Scalar(float(raw["value"]), source_info=source_info)

        enabled = raw_range.get("useRange", raw_range.get("enabled", False))
        return RangedScalar(
            value=float(raw["value"]),
            min_value=float(raw_range["min"]),
            max_value=float(raw_range["max"]),
            default=float(raw_range.get("default", raw["value"])),
            enabled=bool(enabled),
            source_info=source_info,
        )
    raise TypeError(f"Cannot interpret {raw!r} as a numeric input")


def _normalize_inputs(record: Any, *names: str) -> None:
    """Coerce the named fields of a frozen record to input values."""
    for name in names:
        object.__setattr__(record, name, as_input(getattr(record, name)))


class ExpenseType(str, Enum):
    """How an expense line turns into a yearly amount."""

    FIXED_ANNUAL = "FIXED_ANNUAL"  # Amount per year, escalated
    FIXED_MONTHLY = "FIXED_MONTHLY"  # Amount per month x 12, escalated
    PERCENTAGE_REVENUE = "PERCENTAGE_REVENUE"  # % of that year's revenue
    PERCENTAGE_PROPERTY_VALUE = "PERCENTAGE_PROPERTY_VALUE"  # % of that year's value


class ExpenseCategory(str, Enum):
    """Grouping used for the expense breakdown."""

    MAINTENANCE = "Maintenance"
    SERVICES = "Services"
    INSURANCE = "Insurance"
    TAXES = "Taxes"
    UTILITIES = "Utilities"
    MANAGEMENT = "Management"
    OTHER = "Other"


class PaymentFrequency(str, Enum):
    """Mortgage payment frequency."""

    MONTHLY = "MONTHLY"
    BI_WEEKLY = "BI_WEEKLY"
    WEEKLY = "WEEKLY"
    ANNUAL = "ANNUAL"

    @property
    def payments_per_year(self) -> int:
        return _PAYMENTS_PER_YEAR[self]


_PAYMENTS_PER_YEAR = {
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.BI_WEEKLY: 26,
    PaymentFrequency.WEEKLY: 52,
    PaymentFrequency.ANNUAL: 1,
}


@dataclass(frozen=True)
class ExpenseLine:
    """A single operating expense.

    ``amount`` is a dollar figure for the fixed types and a percentage for
    the percentage types.
    """

    name: str
    type: ExpenseType
    amount: InputValue
    category: Optional[ExpenseCategory] = None

    def __post_init__(self):
        _normalize_inputs(self, "amount")
        object.__setattr__(self, "type", ExpenseType(self.type))


@dataclass(frozen=True)
class FinancingInputs:
    """Purchase and mortgage terms. Rates are annual percentages."""

    purchase_price: InputValue
    down_payment: InputValue
    interest_rate: InputValue
    amortization_years: InputValue
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    annual_appreciation_rate: InputValue = field(default_factory=lambda: Scalar(0.0))
    municipal_assessment: Optional[InputValue] = None  # Falls back to price if absent

    def __post_init__(self):
        _normalize_inputs(
            self,
            "purchase_price",
            "down_payment",
            "interest_rate",
            "amortization_years",
            "annual_appreciation_rate",
        )
        if self.municipal_assessment is not None:
            _normalize_inputs(self, "municipal_assessment")
        object.__setattr__(self, "payment_frequency", PaymentFrequency(self.payment_frequency))


@dataclass(frozen=True)
class RevenueInputs:
    """Nightly-rental revenue drivers."""

    average_daily_rate: InputValue  # ADR, $ per night sold
    occupancy_rate: InputValue  # % of days sold
    days_per_year: int = DEFAULT_DAYS_PER_YEAR

    def __post_init__(self):
        _normalize_inputs(self, "average_daily_rate", "occupancy_rate")


@dataclass(frozen=True)
class AcquisitionFees:
    """One-time closing costs besides the transfer duties.

    ``transfer_duties`` is kept for reference; the duties actually charged
    are computed from the progressive schedule.
    """

    transfer_duties: InputValue = field(default_factory=lambda: Scalar(0.0))
    notary_fees: InputValue = field(default_factory=lambda: Scalar(0.0))
    other: InputValue = field(default_factory=lambda: Scalar(0.0))

    def __post_init__(self):
        _normalize_inputs(self, "transfer_duties", "notary_fees", "other")


@dataclass(frozen=True)
class ResolvedProjectionSettings:
    """Projection assumptions as plain percentages, built once per call."""

    revenue_escalation_rate: float
    expense_escalation_rate: float
    capex_rate: float
    discount_rate: float
    sale_costs_rate: float

    @classmethod
    def defaults(cls) -> "ResolvedProjectionSettings":
        return cls(**DEFAULT_PROJECTION_SETTINGS)


@dataclass(frozen=True)
class ProjectionSettings:
    """Multi-year assumptions (annual percentages)."""

    revenue_escalation_rate: InputValue = field(
        default_factory=lambda: Scalar(DEFAULT_PROJECTION_SETTINGS["revenue_escalation_rate"])
    )
    expense_escalation_rate: InputValue = field(
        default_factory=lambda: Scalar(DEFAULT_PROJECTION_SETTINGS["expense_escalation_rate"])
    )
    capex_rate: InputValue = field(
        default_factory=lambda: Scalar(DEFAULT_PROJECTION_SETTINGS["capex_rate"])
    )
    discount_rate: InputValue = field(
        default_factory=lambda: Scalar(DEFAULT_PROJECTION_SETTINGS["discount_rate"])
    )
    sale_costs_rate: InputValue = field(
        default_factory=lambda: Scalar(DEFAULT_PROJECTION_SETTINGS["sale_costs_rate"])
    )

    def __post_init__(self):
        _normalize_inputs(self, *(f.name for f in fields(self)))

    def resolve(self) -> ResolvedProjectionSettings:
        return ResolvedProjectionSettings(
            **{f.name: getattr(self, f.name).resolved for f in fields(self)}
        )


@dataclass(frozen=True)
class ProjectInputs:
    """Complete description of a property purchase.

    This is the immutable snapshot every engine consumes. Overrides produce
    new instances (see ``models.parameters.set_value``).
    """

    financing: FinancingInputs
    revenue: RevenueInputs
    expenses: Tuple[ExpenseLine, ...] = ()
    acquisition_fees: AcquisitionFees = field(default_factory=AcquisitionFees)
    projection_settings: Optional[ProjectionSettings] = None
    name: str = "Project"

    def __post_init__(self):
        object.__setattr__(self, "expenses", tuple(self.expenses))

    def resolved_projection_settings(self) -> ResolvedProjectionSettings:
        """Projection settings with defaults filled in."""
        if self.projection_settings is None:
            return ResolvedProjectionSettings.defaults()
        return self.projection_settings.resolve()
