"""Formula registry for the first-year KPI calculations.

Each KPI has a definition naming its formula and the fields it reads, so a
traced result can be explained and its upstream inputs found.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set


class FormulaCategory(str, Enum):
    """Categories for organizing formulas."""
    INPUT = "Input"
    REVENUE = "Revenue"
    EXPENSES = "Expenses"
    FINANCING = "Financing"
    ACQUISITION = "Acquisition"
    RETURNS = "Returns"


@dataclass
class FormulaDefinition:
    """Definition of a single calculation formula.

    Attributes:
        field_path: Dot-notation path to the field (e.g., "kpi.annual_revenue")
        name: Human-readable name
        formula: Symbolic formula
        inputs: Field paths that feed into this formula
        category: Category for grouping formulas
        unit: Display unit ("$", "%", "nights")
        notes: Optional explanation or caveats
    """
    field_path: str
    name: str
    formula: str
    inputs: List[str]
    category: FormulaCategory
    unit: str = "$"
    notes: str = ""


class FormulaRegistry:
    """Central registry of KPI formulas."""
    _formulas: Dict[str, FormulaDefinition] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, definition: FormulaDefinition) -> None:
        """Register a formula definition."""
        cls._formulas[definition.field_path] = definition

    @classmethod
    def get(cls, field_path: str) -> Optional[FormulaDefinition]:
        cls._ensure_initialized()
        return cls._formulas.get(field_path)

    @classmethod
    def get_all(cls) -> Dict[str, FormulaDefinition]:
        cls._ensure_initialized()
        return cls._formulas.copy()

    @classmethod
    def get_by_category(cls, category: FormulaCategory) -> List[FormulaDefinition]:
        cls._ensure_initialized()
        return [f for f in cls._formulas.values() if f.category == category]

    @classmethod
    def get_inputs(cls, field_path: str) -> List[str]:
        formula = cls.get(field_path)
        return formula.inputs if formula else []

    @classmethod
    def get_dependents(cls, field_path: str) -> List[str]:
        """Get all formulas that use this field as an input."""
        cls._ensure_initialized()
        return [path for path, f in cls._formulas.items() if field_path in f.inputs]

    @classmethod
    def get_all_ancestors(cls, field_path: str) -> Set[str]:
        """Get all upstream dependencies recursively."""
        ancestors: Set[str] = set()
        to_process = list(cls.get_inputs(field_path))

        while to_process:
            current = to_process.pop()
            if current not in ancestors:
                ancestors.add(current)
                to_process.extend(cls.get_inputs(current))

        return ancestors

    @classmethod
    def build_dependency_graph(cls):
        """Build a networkx DiGraph with an edge from each input to its formula."""
        try:
            import networkx as nx
        except ImportError:
            raise ImportError("networkx is required for dependency graphs. Install with: pip install networkx")

        cls._ensure_initialized()
        graph = nx.DiGraph()

        for path, formula in cls._formulas.items():
            graph.add_node(path, name=formula.name, category=formula.category.value, unit=formula.unit)
        for path, formula in cls._formulas.items():
            for input_path in formula.inputs:
                graph.add_edge(input_path, path)

        return graph

    @classmethod
    def _ensure_initialized(cls) -> None:
        if not cls._initialized:
            cls._initialized = True
            _register_kpi_formulas()


def _input(path: str, name: str, unit: str = "$") -> FormulaDefinition:
    return FormulaDefinition(
        field_path=f"inputs.{path}",
        name=name,
        formula="User input",
        inputs=[],
        category=FormulaCategory.INPUT,
        unit=unit,
    )


def _register_kpi_formulas() -> None:
    formulas = [
        _input("average_daily_rate", "Average Daily Rate"),
        _input("occupancy_rate", "Occupancy Rate", unit="%"),
        _input("days_per_year", "Days per Year", unit="days"),
        _input("purchase_price", "Purchase Price"),
        _input("municipal_assessment", "Municipal Assessment"),
        _input("down_payment", "Down Payment"),
        _input("interest_rate", "Interest Rate", unit="%"),
        _input("amortization_years", "Amortization", unit="years"),
        _input("appreciation_rate", "Annual Appreciation", unit="%"),
        _input("notary_fees", "Notary Fees"),
        _input("other_fees", "Other Acquisition Fees"),
        _input("expenses", "Expense Lines"),

        FormulaDefinition(
            field_path="kpi.nights_sold",
            name="Nights Sold",
            formula="days_per_year x occupancy_rate / 100",
            inputs=["inputs.days_per_year", "inputs.occupancy_rate"],
            category=FormulaCategory.REVENUE,
            unit="nights",
        ),
        FormulaDefinition(
            field_path="kpi.annual_revenue",
            name="Annual Gross Revenue",
            formula="average_daily_rate x nights_sold",
            inputs=["inputs.average_daily_rate", "kpi.nights_sold"],
            category=FormulaCategory.REVENUE,
        ),
        FormulaDefinition(
            field_path="kpi.total_expenses",
            name="Total Operating Expenses",
            formula="sum(expense lines)",
            inputs=["inputs.expenses", "kpi.annual_revenue", "inputs.purchase_price"],
            category=FormulaCategory.EXPENSES,
            notes="Percentage lines are taken of revenue or purchase price",
        ),
        FormulaDefinition(
            field_path="kpi.noi",
            name="Net Operating Income",
            formula="annual_revenue - total_expenses",
            inputs=["kpi.annual_revenue", "kpi.total_expenses"],
            category=FormulaCategory.EXPENSES,
        ),
        FormulaDefinition(
            field_path="kpi.loan_amount",
            name="Loan Amount",
            formula="purchase_price - down_payment",
            inputs=["inputs.purchase_price", "inputs.down_payment"],
            category=FormulaCategory.FINANCING,
        ),
        FormulaDefinition(
            field_path="kpi.periodic_payment",
            name="Periodic Payment",
            formula="loan x r x (1 + r)^n / ((1 + r)^n - 1)",
            inputs=["kpi.loan_amount", "inputs.interest_rate", "inputs.amortization_years"],
            category=FormulaCategory.FINANCING,
            notes="r = periodic rate, n = number of payments",
        ),
        FormulaDefinition(
            field_path="kpi.annual_debt_service",
            name="Annual Debt Service",
            formula="periodic_payment x payments_per_year",
            inputs=["kpi.periodic_payment"],
            category=FormulaCategory.FINANCING,
        ),
        FormulaDefinition(
            field_path="kpi.transfer_duties",
            name="Transfer Duties",
            formula="progressive tiers on max(purchase_price, municipal_assessment)",
            inputs=["inputs.purchase_price", "inputs.municipal_assessment"],
            category=FormulaCategory.ACQUISITION,
            notes="0.5% up to 52,800; 1.0% up to 264,000; 1.5% above",
        ),
        FormulaDefinition(
            field_path="kpi.total_acquisition_fees",
            name="Total Acquisition Fees",
            formula="transfer_duties + notary_fees + other_fees",
            inputs=["kpi.transfer_duties", "inputs.notary_fees", "inputs.other_fees"],
            category=FormulaCategory.ACQUISITION,
        ),
        FormulaDefinition(
            field_path="kpi.initial_investment",
            name="Initial Investment",
            formula="down_payment + total_acquisition_fees",
            inputs=["inputs.down_payment", "kpi.total_acquisition_fees"],
            category=FormulaCategory.ACQUISITION,
        ),
        FormulaDefinition(
            field_path="kpi.annual_cashflow",
            name="Annual Cashflow",
            formula="annual_revenue - total_expenses - annual_debt_service",
            inputs=["kpi.annual_revenue", "kpi.total_expenses", "kpi.annual_debt_service"],
            category=FormulaCategory.RETURNS,
        ),
        FormulaDefinition(
            field_path="kpi.principal_paid_first_year",
            name="First-Year Principal Repaid",
            formula="loan_amount - balance after one year of payments",
            inputs=["kpi.loan_amount", "inputs.interest_rate", "kpi.periodic_payment"],
            category=FormulaCategory.RETURNS,
        ),
        FormulaDefinition(
            field_path="kpi.property_appreciation",
            name="First-Year Appreciation",
            formula="purchase_price x appreciation_rate / 100",
            inputs=["inputs.purchase_price", "inputs.appreciation_rate"],
            category=FormulaCategory.RETURNS,
        ),
        FormulaDefinition(
            field_path="kpi.total_annual_profit",
            name="Total Annual Profit",
            formula="annual_cashflow + principal_paid_first_year + property_appreciation",
            inputs=["kpi.annual_cashflow", "kpi.principal_paid_first_year", "kpi.property_appreciation"],
            category=FormulaCategory.RETURNS,
        ),
        FormulaDefinition(
            field_path="kpi.total_roi",
            name="Total ROI",
            formula="total_annual_profit / initial_investment x 100",
            inputs=["kpi.total_annual_profit", "kpi.initial_investment"],
            category=FormulaCategory.RETURNS,
            unit="%",
        ),
        FormulaDefinition(
            field_path="kpi.cash_on_cash",
            name="Cash-on-Cash Return",
            formula="annual_cashflow / initial_investment x 100",
            inputs=["kpi.annual_cashflow", "kpi.initial_investment"],
            category=FormulaCategory.RETURNS,
            unit="%",
        ),
        FormulaDefinition(
            field_path="kpi.cap_rate",
            name="Cap Rate",
            formula="noi / purchase_price x 100",
            inputs=["kpi.noi", "inputs.purchase_price"],
            category=FormulaCategory.RETURNS,
            unit="%",
        ),
    ]

    for formula in formulas:
        FormulaRegistry.register(formula)
