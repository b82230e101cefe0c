"""
Chemistry helpers: formula parsing and theoretical isotope distributions.
"""

from isocorr.chem.distribution import (
    parse_formula,
    calculate_distributions,
    distribution_for_formula,
    use_negative_distribution,
    FormulaDistributionSource,
)

__all__ = [
    'parse_formula',
    'calculate_distributions',
    'distribution_for_formula',
    'use_negative_distribution',
    'FormulaDistributionSource',
]
