"""Internal rate of return and net present value."""

import logging
from typing import Sequence

from .utils import round2

logger = logging.getLogger(__name__)

DEFAULT_GUESS = 0.10
MAX_ITERATIONS = 100
TOLERANCE = 1e-6


def npv(rate: float, cashflows: Sequence[float]) -> float:
    """Net present value with the first flow at t = 0.

    NPV(r) = sum(C[i] / (1 + r)^i)
    """
    return sum(cf / (1 + rate) ** i for i, cf in enumerate(cashflows))


def calculate_irr(
    cashflows: Sequence[float],
    guess: float = DEFAULT_GUESS,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
) -> float:
    """Solve NPV(r) = 0 with Newton-Raphson.

    Starting from ``guess``, iterate r <- r - NPV(r) / NPV'(r) with
    NPV'(r) = sum(-i x C[i] / (1 + r)^(i + 1)) until the step is below
    ``tolerance``.

    There is no bracketing fallback: a series that does not converge within
    ``max_iterations`` (or hits a flat derivative) yields 0.

    Args:
        cashflows: C[0..n], C[0] usually the (negative) investment.
        guess: Starting rate as a decimal.
        max_iterations: Iteration budget.
        tolerance: Convergence threshold on the rate step.

    Returns:
        IRR in percent rounded to 2 decimals, or 0 without convergence.

    Example:
        >>> calculate_irr([-1000, 1100])
        10.0
    """
    rate = guess

    for _ in range(max_iterations):
        # Rates at or below -100% leave the domain of the discount factor
        if rate <= -1:
            break

        value = 0.0
        derivative = 0.0
        try:
            for i, cf in enumerate(cashflows):
                value += cf / (1 + rate) ** i
                derivative += -i * cf / (1 + rate) ** (i + 1)
        except OverflowError:
            break

        if derivative == 0:
            break

        new_rate = rate - value / derivative
        if abs(new_rate - rate) < tolerance:
            return round2(new_rate * 100)
        rate = new_rate

    logger.debug("IRR did not converge for %d cashflows; returning 0", len(cashflows))
    return 0.0
