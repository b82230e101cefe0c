"""
isocorr: isotopic overlap correction for lipidomics MS1 quantitation.

Packages:
- core: configuration, data model and interval geometry
- chem: chemical formulas and theoretical isotope distributions
- overlap: OverlapSpace and OverlapRegistry, the correction engine
- workflows: correction of a whole analyte set in dependency order
- pipelines: composed entry point
"""

from isocorr.core.config import CorrectionConfig, load_config
from isocorr.core.datatypes import (
    Analyte,
    CorrectionResult,
    Ellipse,
    IsotopeDistribution,
    Peak,
    ResolutionLedger,
)
from isocorr.overlap import OverlapRegistry, OverlapSpace
from isocorr.pipelines import run_isotope_correction

__version__ = "0.1.0"

__all__ = [
    'CorrectionConfig',
    'load_config',
    'Analyte',
    'CorrectionResult',
    'Ellipse',
    'IsotopeDistribution',
    'Peak',
    'ResolutionLedger',
    'OverlapRegistry',
    'OverlapSpace',
    'run_isotope_correction',
]
