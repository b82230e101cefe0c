"""
isocorr pipelines module.

High-level pipeline functions for composing workflow steps.
"""

from .correction import run_isotope_correction, report_summary

__all__ = [
    'run_isotope_correction',
    'report_summary',
]
