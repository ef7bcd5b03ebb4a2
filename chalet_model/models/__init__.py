"""Data models for the chalet investment model."""

from .lookups import (
    TransferDutyTier,
    TRANSFER_DUTY_TIERS,
    DEFAULT_PROJECTION_SETTINGS,
    DEFAULT_DAYS_PER_YEAR,
    EXIT_SCENARIO_YEARS,
    DSCR_UNCONSTRAINED,
    EngineLimits,
    LIMITS,
)
from .inputs import (
    SourceInfo,
    Scalar,
    RangedScalar,
    InputValue,
    as_input,
    ExpenseType,
    ExpenseCategory,
    PaymentFrequency,
    ExpenseLine,
    FinancingInputs,
    RevenueInputs,
    AcquisitionFees,
    ProjectionSettings,
    ResolvedProjectionSettings,
    ProjectInputs,
)
from .parameters import (
    InputField,
    ExpenseAmount,
    ParameterKey,
    PARAMETER_LABELS,
    parse_parameter,
    applied_value,
    get_value,
    set_value,
    parameter_label,
    iter_ranged_parameters,
)

__all__ = [
    "TransferDutyTier",
    "TRANSFER_DUTY_TIERS",
    "DEFAULT_PROJECTION_SETTINGS",
    "DEFAULT_DAYS_PER_YEAR",
    "EXIT_SCENARIO_YEARS",
    "DSCR_UNCONSTRAINED",
    "EngineLimits",
    "LIMITS",
    "SourceInfo",
    "Scalar",
    "RangedScalar",
    "InputValue",
    "as_input",
    "ExpenseType",
    "ExpenseCategory",
    "PaymentFrequency",
    "ExpenseLine",
    "FinancingInputs",
    "RevenueInputs",
    "AcquisitionFees",
    "ProjectionSettings",
    "ResolvedProjectionSettings",
    "ProjectInputs",
    "InputField",
    "ExpenseAmount",
    "ParameterKey",
    "PARAMETER_LABELS",
    "parse_parameter",
    "applied_value",
    "get_value",
    "set_value",
    "parameter_label",
    "iter_ranged_parameters",
]
