# workflows/isotope_correction.py

"""
Workflow for isotopic overlap correction of a whole analyte set.

Functions for finding overlapping candidates, building the per-analyte
registries and resolving them in dependency order.
"""

import copy
import warnings
from typing import Callable, Optional

from isocorr.core.config import CorrectionConfig
from isocorr.core.datatypes import Analyte, CorrectionResult, IsotopeDistribution, ResolutionLedger
from isocorr.core.functional import banner
from isocorr.core.geometry import windows_within
from isocorr.overlap.registry import OverlapRegistry
from isocorr.overlap.space import OverlapSpace

DistributionSource = Callable[[Analyte], IsotopeDistribution]
AnalyteGroups = dict[str, list[Analyte]]


class DistributionUnavailableWarning(UserWarning):
    """No isotope distribution for an analyte; it is not subtracted from others."""


# ============================================================================
# CANDIDATE SEARCH
# ============================================================================

def is_candidate(base: Analyte, candidate: Analyte,
                 distribution: IsotopeDistribution,
                 config: CorrectionConfig) -> bool:
    """
    Coarse check whether ``candidate``'s envelope can reach ``base``.

    The candidate must lie within ``max_isotopes`` neutron masses of the
    base, on the light side for positive envelopes and on the heavy side
    for negative ones. With ``config.rt_tolerance`` set, the isotope-0
    time windows must also come close.
    """
    tol = config.coarse_mz_tolerance
    reach = config.max_isotopes * config.neutron_mass + tol
    if not (base.mz - reach < candidate.mz < base.mz + reach):
        return False

    if distribution.negative:
        on_right_side = base.mz < candidate.mz - tol
    else:
        on_right_side = base.mz > candidate.mz + tol
    if not on_right_side:
        return False

    if config.rt_tolerance is not None:
        return _elute_together(base, candidate, config.rt_tolerance)
    return True


def _elute_together(base: Analyte, candidate: Analyte, rt_tolerance: float) -> bool:
    if not base.isotopes or not candidate.isotopes:
        return False
    for peak in base.isotopes[0]:
        for other in candidate.isotopes[0]:
            if windows_within(*peak.time_window(), *other.time_window(), rt_tolerance):
                return True
    return False


def check_isotopic_overlap(base: Analyte, candidate: Analyte,
                           distribution: IsotopeDistribution,
                           config: CorrectionConfig) -> OverlapSpace:
    """
    Build the overlap space of ``candidate`` against ``base``.

    The space is only populated when the coarse prefilter passes; otherwise
    it reports no overlap.
    """
    space = OverlapSpace(candidate.analyte_id, config.max_isotopes, config)
    if is_candidate(base, candidate, distribution, config):
        space.set_parameter_set(candidate, distribution, distribution.negative)
        space.determine_overlapping_parts(base)
    return space


def build_registries(groups: AnalyteGroups,
                     distribution_source: DistributionSource,
                     config: CorrectionConfig) -> tuple[dict[str, Analyte], dict[str, OverlapRegistry], ResolutionLedger]:
    """
    Create an OverlapRegistry for every analyte that is overlapped by another.

    Args:
        groups: Analytes per lipid class
        distribution_source: Isotope distribution of an analyte
        config: Correction settings

    Returns:
        (pending analytes, their registries, ledger holding the analytes
        that need no correction)
    """
    all_analytes = [mol for mols in groups.values() for mol in mols]
    distributions: dict[str, Optional[IsotopeDistribution]] = {}

    def distribution_of(mol: Analyte) -> Optional[IsotopeDistribution]:
        if mol.analyte_id not in distributions:
            try:
                distributions[mol.analyte_id] = distribution_source(mol)
            except ValueError as exc:
                warnings.warn(f"{mol.analyte_id}: no isotope distribution, its overlap is not corrected ({exc})",
                              DistributionUnavailableWarning)
                distributions[mol.analyte_id] = None
        return distributions[mol.analyte_id]

    pending: dict[str, Analyte] = {}
    registries: dict[str, OverlapRegistry] = {}
    ledger = ResolutionLedger()

    for mol in all_analytes:
        registry = OverlapRegistry(mol.analyte_id, config)
        if mol.isotopes:
            for other in all_analytes:
                if other is mol or mol.is_same_species(other) or not other.isotopes:
                    continue
                distribution = distribution_of(other)
                if distribution is None:
                    continue
                space = check_isotopic_overlap(mol, other, distribution, config)
                if space.has_overlap():
                    registry.add_overlap_location(space)

        if registry.has_overlap():
            pending[mol.analyte_id] = mol
            registries[mol.analyte_id] = registry
        else:
            ledger.mark_corrected(mol)

    if config.verbose:
        print(f"  ✓ {len(ledger.corrected)} analytes without overlap, {len(pending)} to correct")
    return pending, registries, ledger


# ============================================================================
# DEPENDENCY RESOLUTION
# ============================================================================

def resolve_overlaps(pending: dict[str, Analyte],
                     registries: dict[str, OverlapRegistry],
                     ledger: ResolutionLedger,
                     config: CorrectionConfig) -> tuple[int, list[str]]:
    """
    Correct pending analytes once everything overlapping them is final.

    Each round corrects every analyte whose overlapping analytes are all
    corrected or removed. Before correcting, the registry is rebuilt from the
    corrected candidates, since their correction can change the overlap.
    Analytes whose total area vanishes are removed. Rounds stop when nothing
    is pending or when a round makes no progress (dependency cycle).

    Args:
        pending: Analytes waiting for correction (corrected in place)
        registries: Registry per pending analyte
        ledger: Corrected/removed analytes, updated in place
        config: Correction settings

    Returns:
        (number of rounds, ids that could not be resolved)
    """
    queue = dict(pending)
    n_rounds = 0
    while queue:
        n_rounds += 1
        ready = [aid for aid in queue if registries[aid].is_correction_possible(ledger)]
        if not ready:
            break

        for aid in ready:
            mol = queue.pop(aid)
            registry = registries[aid]
            if registry.reinit_overlap_locations(mol, ledger, config.max_isotopes):
                registry.make_isotopic_correction(mol)
                if mol.area is None or mol.area <= 0:
                    ledger.mark_removed(aid)
                    if config.verbose:
                        print(f"  ⚠ {aid} removed: no area left after correction")
                    continue
            ledger.mark_corrected(mol)

        if config.verbose:
            print(f"  Round {n_rounds}: {len(ready)} resolved, {len(queue)} pending")

    unresolved = sorted(queue)
    if unresolved and config.verbose:
        print(f"  ⚠ {len(unresolved)} analytes overlap in a cycle and stay uncorrected:")
        for aid in unresolved:
            blockers = [o for o in registries[aid].overlapping_ids() if o not in ledger]
            print(f"      {aid} <- {', '.join(blockers)}")
    return n_rounds, unresolved


# ============================================================================
# WHOLE SET
# ============================================================================

def correct_isotopic_pattern(groups: AnalyteGroups,
                             distribution_source: DistributionSource,
                             config: Optional[CorrectionConfig] = None,
                             in_place: bool = False) -> CorrectionResult:
    """
    Correct the isotope areas of all analytes for overlapping envelopes.

    Args:
        groups: Analytes per lipid class
        distribution_source: Isotope distribution of an analyte
        config: Correction settings (defaults to CorrectionConfig())
        in_place: Correct the given analytes instead of copies

    Returns:
        CorrectionResult with the analytes per group in input order;
        removed analytes are left out, unresolved ones are kept uncorrected
    """
    config = config or CorrectionConfig()
    if not in_place:
        groups = copy.deepcopy(groups)

    banner("Isotopic overlap correction", config.verbose)
    if config.verbose:
        print(f"\n[1/2] Searching overlaps in {sum(len(m) for m in groups.values())} analytes...")
    pending, registries, ledger = build_registries(groups, distribution_source, config)

    if config.verbose:
        print("\n[2/2] Resolving overlaps...")
    n_rounds, unresolved = resolve_overlaps(pending, registries, ledger, config)

    corrected: AnalyteGroups = {}
    for group, mols in groups.items():
        kept = []
        for mol in mols:
            aid = mol.analyte_id
            if aid in ledger.corrected:
                kept.append(ledger.corrected[aid])
            elif not ledger.is_explicitly_removed(aid):
                kept.append(mol)
        corrected[group] = kept

    return CorrectionResult(
        corrected=corrected,
        removed=sorted(ledger.removed),
        unresolved=unresolved,
        n_rounds=n_rounds,
    )
