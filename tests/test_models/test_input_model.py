"""Tests for input normalization and the input records."""

import pytest
from dataclasses import FrozenInstanceError

from chalet_model.models import (
    ExpenseLine,
    ExpenseType,
    FinancingInputs,
    PaymentFrequency,
    ProjectionSettings,
    RangedScalar,
    ResolvedProjectionSettings,
    Scalar,
    SourceInfo,
    as_input,
    DEFAULT_PROJECTION_SETTINGS,
)


class TestAsInput:
    """Test normalization of raw values."""

    def test_number_becomes_scalar(self):
        value = as_input(250)

        assert isinstance(value, Scalar)
        assert value.resolved == 250.0

    def test_existing_input_is_returned_unchanged(self):
        ranged = RangedScalar(value=1, min_value=0, max_value=2, default=1)

        assert as_input(ranged) is ranged

    def test_mapping_without_range_becomes_scalar(self):
        value = as_input({"value": 12, "sourceInfo": {"source": "Broker", "remarks": "2024"}})

        assert isinstance(value, Scalar)
        assert value.resolved == 12.0
        assert value.source_info == SourceInfo(source="Broker", remarks="2024")

    def test_mapping_with_range_becomes_ranged_scalar(self):
        value = as_input({
            "value": 200,
            "range": {"min": 150, "max": 250, "default": 210, "useRange": True},
        })

        assert isinstance(value, RangedScalar)
        assert value.min_value == 150
        assert value.max_value == 250
        assert value.enabled is True
        assert value.resolved == 210

    def test_disabled_range_reads_value(self):
        value = as_input({
            "value": 200,
            "range": {"min": 150, "max": 250, "default": 210, "useRange": False},
        })

        assert isinstance(value, RangedScalar)
        assert value.resolved == 200

    def test_boolean_is_rejected(self):
        with pytest.raises(TypeError):
            as_input(True)

    def test_unknown_shape_is_rejected(self):
        with pytest.raises(TypeError):
            as_input("200")


class TestWithValue:
    """Overrides always become the value calculations read."""

    def test_scalar_override(self):
        assert Scalar(5.0).with_value(7.5).resolved == 7.5

    def test_enabled_range_override_is_resolved(self):
        ranged = RangedScalar(value=200, min_value=150, max_value=250, default=210)

        overridden = ranged.with_value(180)

        assert overridden.resolved == 180
        assert overridden.value == 180
        assert overridden.min_value == 150
        assert overridden.max_value == 250

    def test_disabled_range_override_keeps_default(self):
        ranged = RangedScalar(value=200, min_value=150, max_value=250, default=210, enabled=False)

        overridden = ranged.with_value(180)

        assert overridden.resolved == 180
        assert overridden.default == 210


class TestRecords:
    """Test the frozen input records."""

    def test_fields_are_normalized(self):
        financing = FinancingInputs(
            purchase_price=300_000,
            down_payment=75_000,
            interest_rate=5,
            amortization_years=25,
            payment_frequency="BI_WEEKLY",
        )

        assert isinstance(financing.purchase_price, Scalar)
        assert financing.payment_frequency == PaymentFrequency.BI_WEEKLY
        assert financing.annual_appreciation_rate.resolved == 0.0
        assert financing.municipal_assessment is None

    def test_records_are_immutable(self, reference_inputs):
        with pytest.raises(FrozenInstanceError):
            reference_inputs.name = "Changed"

    def test_expenses_become_a_tuple(self, reference_inputs):
        assert isinstance(reference_inputs.expenses, tuple)

    def test_expense_type_accepts_string(self):
        line = ExpenseLine("Cleaning", "PERCENTAGE_REVENUE", 10)

        assert line.type == ExpenseType.PERCENTAGE_REVENUE

    @pytest.mark.parametrize("frequency,expected", [
        (PaymentFrequency.MONTHLY, 12),
        (PaymentFrequency.BI_WEEKLY, 26),
        (PaymentFrequency.WEEKLY, 52),
        (PaymentFrequency.ANNUAL, 1),
    ])
    def test_payments_per_year(self, frequency, expected):
        assert frequency.payments_per_year == expected


class TestProjectionSettings:
    """Test resolution of the projection settings record."""

    def test_missing_settings_use_defaults(self, reference_inputs):
        from dataclasses import replace

        inputs = replace(reference_inputs, projection_settings=None)

        assert inputs.resolved_projection_settings() == ResolvedProjectionSettings(
            **DEFAULT_PROJECTION_SETTINGS
        )

    def test_settings_resolve_ranged_values(self):
        settings = ProjectionSettings(
            revenue_escalation_rate={
                "value": 2,
                "range": {"min": 0, "max": 4, "default": 3, "useRange": True},
            },
        )

        resolved = settings.resolve()

        assert resolved.revenue_escalation_rate == 3
        assert resolved.sale_costs_rate == DEFAULT_PROJECTION_SETTINGS["sale_costs_rate"]
