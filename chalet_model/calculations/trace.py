"""Calculation tracing for KPI audit trails.

A TraceContext records the values each KPI formula actually used, so a
result can be explained line by line after the fact.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .formula_registry import FormulaDefinition, FormulaRegistry


@dataclass
class TracedValue:
    """A single traced calculation."""
    field_path: str
    value: float
    formula_def: Optional[FormulaDefinition]
    input_values: Dict[str, float]
    computed_formula: str  # Formula with values substituted
    timestamp: datetime = field(default_factory=datetime.now)
    period: Optional[int] = None
    notes: str = ""

    @property
    def unit(self) -> str:
        return self.formula_def.unit if self.formula_def else "$"

    def format_inputs(self) -> str:
        """Format input values for display."""
        parts = []
        for name, val in self.input_values.items():
            short_name = name.split(".")[-1]
            input_def = FormulaRegistry.get(name)
            unit = input_def.unit if input_def else "$"
            parts.append(f"{short_name}={format_value(val, unit)}")
        return ", ".join(parts)


def format_value(value: float, unit: str = "$") -> str:
    """Format a traced value according to its display unit."""
    if unit == "%":
        return f"{value:,.2f}%"
    if unit != "$":
        return f"{value:,.0f} {unit}"
    if abs(value) >= 1_000_000:
        return f"${value/1_000_000:,.2f}M"
    elif abs(value) >= 1_000:
        return f"${value/1_000:,.1f}K"
    elif value == 0:
        return "$0"
    return f"${value:,.2f}"


class TraceContext:
    """Context manager for capturing calculation traces.

    Usage:
        with TraceContext() as ctx:
            kpis = calculate_kpis(inputs)
            # ctx.traces now holds every traced KPI

    The active context lives in a class variable so trace() calls can reach
    it from anywhere in the call stack. Only one context is active at a time.
    """
    _current: Optional['TraceContext'] = None

    def __init__(self, enabled: bool = True):
        """Initialize trace context.

        Args:
            enabled: If False, trace() calls are no-ops.
        """
        self.enabled = enabled
        self.traces: Dict[str, TracedValue] = {}
        self._start_time = datetime.now()

    def __enter__(self) -> 'TraceContext':
        TraceContext._current = self
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        TraceContext._current = None

    def trace(
        self,
        field_path: str,
        value: float,
        input_values: Dict[str, float],
        period: Optional[int] = None,
        notes: str = "",
    ) -> None:
        """Record a traced calculation.

        Args:
            field_path: The formula field path (e.g., "kpi.annual_revenue")
            value: The calculated result
            input_values: Dict of input field path -> value used
            period: Optional projection year for year-specific values
            notes: Optional notes about this specific calculation
        """
        if not self.enabled:
            return

        formula_def = FormulaRegistry.get(field_path)
        computed_formula = self._substitute_values(formula_def, field_path, input_values, value)

        trace_key = f"{field_path}:{period}" if period is not None else field_path

        self.traces[trace_key] = TracedValue(
            field_path=field_path,
            value=value,
            formula_def=formula_def,
            input_values=input_values,
            computed_formula=computed_formula,
            timestamp=datetime.now(),
            period=period,
            notes=notes,
        )

    def _substitute_values(
        self,
        formula_def: Optional[FormulaDefinition],
        field_path: str,
        input_values: Dict[str, float],
        result: float,
    ) -> str:
        """Render "formula = inputs = result", e.g. "a - b = $60.0K, $20.0K = $40.0K"."""
        formula = formula_def.formula if formula_def else field_path
        unit = formula_def.unit if formula_def else "$"
        result_str = format_value(result, unit)

        if not input_values:
            return f"{formula} = {result_str}"

        values_str = ", ".join(
            format_value(val, FormulaRegistry.get(name).unit if FormulaRegistry.get(name) else "$")
            for name, val in input_values.items()
        )
        return f"{formula} = {values_str} = {result_str}"

    def get_trace(self, field_path: str, period: Optional[int] = None) -> Optional[TracedValue]:
        """Get a specific trace by field path and optional period."""
        trace_key = f"{field_path}:{period}" if period is not None else field_path
        return self.traces.get(trace_key)

    def get_traces_by_category(self, category: str) -> Dict[str, TracedValue]:
        return {
            k: v for k, v in self.traces.items()
            if v.formula_def and v.formula_def.category.value == category
        }

    def get_calculation_chain(self, field_path: str, period: Optional[int] = None) -> List[TracedValue]:
        """Get the full calculation chain for a value, inputs first."""
        chain: List[TracedValue] = []
        visited = set()

        def _collect_chain(path: str, per: Optional[int]):
            trace_key = f"{path}:{per}" if per is not None else path
            if trace_key in visited:
                return
            visited.add(trace_key)

            traced = self.get_trace(path, per)
            if traced:
                for input_path in traced.input_values.keys():
                    _collect_chain(input_path, per)
                chain.append(traced)

        _collect_chain(field_path, period)
        return chain

    def summary(self) -> str:
        """Generate a summary of all traces."""
        lines = [
            f"Trace Summary ({len(self.traces)} calculations traced)",
            f"Duration: {datetime.now() - self._start_time}",
            "",
        ]

        by_category: Dict[str, List[TracedValue]] = {}
        for traced in self.traces.values():
            cat = traced.formula_def.category.value if traced.formula_def else "Unknown"
            by_category.setdefault(cat, []).append(traced)

        for category, traces in sorted(by_category.items()):
            lines.append(f"=== {category} ({len(traces)} traces) ===")
            for traced in traces:
                lines.append(f"  {traced.field_path}: {traced.computed_formula}")
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def current() -> Optional['TraceContext']:
        """Get the current active trace context."""
        return TraceContext._current


def trace(
    field_path: str,
    value: float,
    input_values: Dict[str, float],
    period: Optional[int] = None,
    notes: str = "",
) -> float:
    """Trace a calculation and return the value unchanged.

    Usable inline:
        noi = trace("kpi.noi", revenue - expenses, {"kpi.annual_revenue": revenue, ...})
    """
    ctx = TraceContext.current()
    if ctx:
        ctx.trace(field_path, value, input_values, period, notes)
    return value
