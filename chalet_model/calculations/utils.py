"""Small numeric helpers shared by the calculation modules."""


def round2(value: float, decimals: int = 2) -> float:
    """Round a money or percentage figure for reporting."""
    return float(round(value, decimals))


def safe_ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    """numerator / denominator x scale, or 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * scale
