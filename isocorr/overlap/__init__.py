"""
Isotope overlap engine.

Modules:
- space: footprint of one candidate analyte and its overlap with a base analyte
- registry: all overlapping candidates of one base analyte and the area correction
"""

from isocorr.overlap.space import OverlapSpace, DistributionTruncationWarning
from isocorr.overlap.registry import OverlapRegistry

__all__ = [
    'OverlapSpace',
    'OverlapRegistry',
    'DistributionTruncationWarning',
]
