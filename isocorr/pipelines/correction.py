# pipelines/correction.py
from functools import partial
from pathlib import Path
from typing import Optional, Union

from isocorr.chem.distribution import FormulaDistributionSource
from isocorr.core.config import CorrectionConfig, load_config
from isocorr.core.datatypes import CorrectionResult
from isocorr.core.functional import pipe_run
from isocorr.workflows.isotope_correction import AnalyteGroups, DistributionSource, correct_isotopic_pattern

# ============================================================================
# MAIN PIPELINE - FUNCTIONAL COMPOSITION
# ============================================================================

def report_summary(result: CorrectionResult, verbose: bool = True) -> CorrectionResult:
    """Print the outcome of a correction run."""
    if verbose:
        s = result.summary()
        print("\n" + "-" * 60)
        print(f"  ✓ Kept {s['kept']} analytes after {s['rounds']} rounds")
        if s['removed']:
            print(f"  ⚠ Removed {s['removed']}: {', '.join(result.removed)}")
        if s['unresolved']:
            print(f"  ⚠ Uncorrected (cyclic overlap) {s['unresolved']}: {', '.join(result.unresolved)}")
    return result


def run_isotope_correction(groups: AnalyteGroups,
                           config: Optional[CorrectionConfig] = None,
                           config_path: Optional[Union[str, Path]] = None,
                           distribution_source: Optional[DistributionSource] = None) -> CorrectionResult:
    """
    Complete isotopic overlap correction pipeline.

    Pipeline stages:
    1. Detect overlapping isotope envelopes between all analytes
    2. Resolve and correct them in dependency order
    3. Report the outcome

    Args:
        groups: Analytes per lipid class
        config: Correction settings; ignored when ``config_path`` is given
        config_path: YAML file with an ``isotope_correction`` section
        distribution_source: Isotope distribution per analyte; defaults to
            the distribution computed from the analyte's chemical formula

    Returns:
        CorrectionResult with corrected analytes per group
    """
    if config_path is not None:
        print(f"Loading configuration from {config_path}")
        config = load_config(config_path)
    config = config or CorrectionConfig()
    if distribution_source is None:
        distribution_source = FormulaDistributionSource(config.max_isotopes, config.label_enrichment)

    steps = [
        partial(correct_isotopic_pattern,
                distribution_source=distribution_source,
                config=config),
        partial(report_summary, verbose=config.verbose),
    ]
    return pipe_run(groups, *steps)
