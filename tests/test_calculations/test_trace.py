"""Tests for the calculation tracing system."""

import networkx as nx

from chalet_model.calculations.formula_registry import FormulaCategory, FormulaRegistry
from chalet_model.calculations.kpis import calculate_kpis
from chalet_model.calculations.trace import TraceContext, format_value, trace


class TestFormulaRegistry:
    """Test the formula registry."""

    def test_formulas_are_registered(self):
        all_formulas = FormulaRegistry.get_all()

        assert len(all_formulas) >= 25
        assert "kpi.total_roi" in all_formulas

    def test_can_get_formula_by_path(self):
        formula = FormulaRegistry.get("kpi.noi")

        assert formula is not None
        assert formula.name == "Net Operating Income"
        assert formula.inputs == ["kpi.annual_revenue", "kpi.total_expenses"]

    def test_unknown_path(self):
        assert FormulaRegistry.get("kpi.nope") is None
        assert FormulaRegistry.get_inputs("kpi.nope") == []

    def test_can_get_by_category(self):
        financing = FormulaRegistry.get_by_category(FormulaCategory.FINANCING)

        assert {f.field_path for f in financing} >= {"kpi.loan_amount", "kpi.periodic_payment"}
        for formula in financing:
            assert formula.category == FormulaCategory.FINANCING

    def test_can_get_dependents(self):
        dependents = FormulaRegistry.get_dependents("kpi.initial_investment")

        assert set(dependents) == {"kpi.total_roi", "kpi.cash_on_cash"}

    def test_ancestors_reach_inputs(self):
        ancestors = FormulaRegistry.get_all_ancestors("kpi.cash_on_cash")

        assert "inputs.occupancy_rate" in ancestors
        assert "inputs.down_payment" in ancestors
        assert "kpi.property_appreciation" not in ancestors

    def test_dependency_graph_is_acyclic(self):
        graph = FormulaRegistry.build_dependency_graph()

        assert nx.is_directed_acyclic_graph(graph)
        assert graph.has_edge("inputs.occupancy_rate", "kpi.nights_sold")
        assert graph.nodes["kpi.total_roi"]["unit"] == "%"

    def test_every_input_is_registered(self):
        registered = FormulaRegistry.get_all()

        for formula in registered.values():
            for input_path in formula.inputs:
                assert input_path in registered, f"{formula.field_path} reads unregistered {input_path}"


class TestTraceContext:
    """Test the trace context manager."""

    def test_trace_context_captures_traces(self):
        with TraceContext() as ctx:
            trace("test.value", 100.0, {"input_a": 50.0, "input_b": 50.0})

        assert "test.value" in ctx.traces
        traced = ctx.traces["test.value"]
        assert traced.value == 100.0
        assert traced.input_values["input_a"] == 50.0
        assert traced.formula_def is None

    def test_trace_context_can_be_disabled(self):
        with TraceContext(enabled=False) as ctx:
            trace("test.value", 100.0, {"input_a": 50.0})

        assert len(ctx.traces) == 0

    def test_trace_with_period(self):
        with TraceContext() as ctx:
            trace("test.value", 100.0, {"input": 100.0}, period=5)

        assert "test.value:5" in ctx.traces
        assert ctx.get_trace("test.value", period=5).period == 5

    def test_trace_returns_value_without_context(self):
        assert TraceContext.current() is None
        assert trace("test.value", 42.0, {"x": 42.0}) == 42.0

    def test_nested_context_not_supported(self):
        """Only one TraceContext can be active at a time."""
        with TraceContext():
            with TraceContext() as inner:
                trace("inner.value", 1.0, {})

            assert TraceContext.current() is None

        assert "inner.value" in inner.traces
        assert TraceContext.current() is None


class TestFormatValue:
    def test_units(self):
        assert format_value(8.5, "%") == "8.50%"
        assert format_value(219, "nights") == "219 nights"
        assert format_value(0) == "$0"
        assert format_value(950) == "$950.00"
        assert format_value(43_800) == "$43.8K"
        assert format_value(1_250_000) == "$1.25M"


class TestKPITracing:
    """Tracing the first-year KPI evaluation."""

    def test_calculate_kpis_captures_traces(self, reference_inputs):
        with TraceContext() as ctx:
            kpis = calculate_kpis(reference_inputs)

        for path in ("kpi.nights_sold", "kpi.noi", "kpi.initial_investment", "kpi.total_roi"):
            assert path in ctx.traces, f"Missing trace: {path}"

        assert ctx.traces["kpi.noi"].value == kpis.noi
        assert ctx.traces["kpi.total_roi"].value == kpis.total_roi

    def test_computed_formula(self, reference_inputs):
        with TraceContext() as ctx:
            calculate_kpis(reference_inputs)

        assert ctx.get_trace("kpi.noi").computed_formula == (
            "annual_revenue - total_expenses = $43.8K, $20.0K = $23.8K"
        )

    def test_expense_lines_are_inputs(self, reference_inputs):
        with TraceContext() as ctx:
            calculate_kpis(reference_inputs)

        assert ctx.get_trace("kpi.total_expenses").input_values == {"Operating costs": 20_000}

    def test_calculation_chain_lists_inputs_first(self, reference_inputs):
        with TraceContext() as ctx:
            calculate_kpis(reference_inputs)

        chain = [t.field_path for t in ctx.get_calculation_chain("kpi.noi")]

        assert chain[-1] == "kpi.noi"
        assert chain.index("kpi.nights_sold") < chain.index("kpi.annual_revenue")
        assert "kpi.total_expenses" in chain

    def test_traces_by_category(self, reference_inputs):
        with TraceContext() as ctx:
            calculate_kpis(reference_inputs)

        acquisition = ctx.get_traces_by_category("Acquisition")

        assert set(acquisition) == {
            "kpi.transfer_duties", "kpi.total_acquisition_fees", "kpi.initial_investment",
        }

    def test_summary(self, reference_inputs):
        with TraceContext() as ctx:
            calculate_kpis(reference_inputs)

        summary = ctx.summary()

        assert summary.startswith(f"Trace Summary ({len(ctx.traces)} calculations traced)")
        assert "=== Revenue" in summary

    def test_format_inputs(self, reference_inputs):
        with TraceContext() as ctx:
            calculate_kpis(reference_inputs)

        assert ctx.get_trace("kpi.nights_sold").format_inputs() == "days_per_year=365 days, occupancy_rate=60.00%"
