"""
Collection of all overlapping candidates of one base analyte.

The registry decides when the base analyte can be corrected (every
overlapping analyte must be final) and subtracts the expected candidate
signal from the raw isotope areas.
"""

from typing import Optional

from isocorr.core.config import CorrectionConfig
from isocorr.core.datatypes import Analyte, IsotopeDistribution, Peak, ResolutionLedger
from isocorr.overlap.space import OverlapSpace


class OverlapRegistry:

    def __init__(self, analyte_id: str, config: Optional[CorrectionConfig] = None):
        self.analyte_id = analyte_id
        self.config = config or CorrectionConfig()
        self._init_tables()

    def _init_tables(self):
        self.iso_affected_by: dict[int, list[int]] = {}
        self.spaces: list[OverlapSpace] = []

    def __repr__(self) -> str:
        return f"OverlapRegistry(analyte_id={self.analyte_id!r}, overlapping={self.overlapping_ids()})"

    def has_overlap(self) -> bool:
        return len(self.spaces) > 0

    def overlapping_ids(self) -> list[str]:
        return [space.analyte_id for space in self.spaces]

    def add_overlap_location(self, space: OverlapSpace) -> bool:
        """
        Register an overlapping candidate unless an equivalent one is stored.

        Returns:
            True if the space was added
        """
        if any(stored.is_the_same(space) for stored in self.spaces):
            return False
        loc_nr = len(self.spaces)
        for iso in space.affected_isotopes():
            self.iso_affected_by.setdefault(iso, []).append(loc_nr)
        self.spaces.append(space)
        return True

    def is_correction_possible(self, ledger: ResolutionLedger) -> bool:
        """All overlapping analytes have to be corrected or removed first."""
        return all(ledger.is_resolved(space.analyte_id) or ledger.is_explicitly_removed(space.analyte_id)
                   for space in self.spaces)

    def make_isotopic_correction(self, target: Analyte) -> Analyte:
        """
        Subtract the candidate contributions from the isotope areas of ``target``.

        Peaks whose area drops to zero or below are removed. Isotopes are
        kept contiguous: the first isotope left without peaks ends the list.
        The target is modified in place and returned.
        """
        corrected_isotopes: list[list[Peak]] = []
        for iso, peaks in enumerate(target.isotopes):
            locs = self.iso_affected_by.get(iso)
            if locs:
                kept = []
                for probe_nr, peak in enumerate(peaks):
                    self._correct_peak(peak, iso, probe_nr, locs)
                    if peak.area > 0:
                        kept.append(peak)
            else:
                kept = peaks
            if not kept:
                break
            corrected_isotopes.append(kept)

        target.isotopes = corrected_isotopes
        target.recompute_area()
        return target

    def _correct_peak(self, peak: Peak, iso: int, probe_nr: int, locs: list[int]):
        spaces = [self.spaces[loc] for loc in locs]
        if not any(space.overlaps_of(iso, probe_nr) for space in spaces):
            return
        peak.area -= sum(space.other_isotope_area(iso, probe_nr) for space in spaces)

    def reinit_overlap_locations(self, base: Analyte, ledger: ResolutionLedger, max_isotopes: int) -> bool:
        """
        Rebuild the overlaps from the corrected versions of the candidates.

        Candidates that are not in ``ledger.corrected`` (e.g. removed ones)
        are dropped. Candidates that no longer overlap after their own
        correction are dropped as well.

        Returns:
            True if any overlap remains
        """
        previous: list[tuple[str, IsotopeDistribution, bool]] = [
            (space.analyte_id, space.distribution, space.negative) for space in self.spaces
        ]
        self._init_tables()

        still_overlapping = False
        for analyte_id, distribution, negative in previous:
            candidate = ledger.corrected.get(analyte_id)
            if candidate is None or not candidate.isotopes:
                continue
            space = OverlapSpace(analyte_id, max_isotopes, self.config)
            space.set_parameter_set(candidate, distribution, negative)
            if space.determine_overlapping_parts(base):
                self.add_overlap_location(space)
                still_overlapping = True
        return still_overlapping
