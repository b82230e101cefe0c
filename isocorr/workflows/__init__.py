"""
isocorr workflows module.

Workflow functions for coordinating the overlap engine over an analyte set.
"""

from .isotope_correction import (
    is_candidate,
    check_isotopic_overlap,
    build_registries,
    resolve_overlaps,
    correct_isotopic_pattern,
    DistributionUnavailableWarning,
)

__all__ = [
    'is_candidate',
    'check_isotopic_overlap',
    'build_registries',
    'resolve_overlaps',
    'correct_isotopic_pattern',
    'DistributionUnavailableWarning',
]
