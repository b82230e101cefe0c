"""
Geometric footprint of a candidate analyte's isotope envelope.

An OverlapSpace holds, for every isotope-0 peak of one candidate analyte,
the retention-time window and the m/z windows of the first ``max_isotopes``
isotopes (each shifted by ``i * neutron_mass / charge``). Peaks of a base
analyte are then tested against this footprint to find the signal the
candidate contributes to them.
"""

import warnings
from typing import Optional

import numpy as np

from isocorr.core.config import CorrectionConfig
from isocorr.core.datatypes import Analyte, IsotopeDistribution, Peak
from isocorr.core.geometry import is_within_range, overlap_fraction, within_relative_tolerance

# (peak number of the candidate, isotope number of the candidate)
OverlapRef = tuple[int, int]


class DistributionTruncationWarning(UserWarning):
    """Isotope distribution is shorter than the isotope that was queried."""


class OverlapSpace:

    def __init__(self, analyte_id: str, max_isotopes: int, config: Optional[CorrectionConfig] = None):
        self.analyte_id = analyte_id
        self.max_isotopes = max_isotopes
        self.config = config or CorrectionConfig()

        self.distribution: Optional[IsotopeDistribution] = None
        self.negative = False
        self.n_peaks = 0
        self.n_isotopes = 0
        self.time_range = np.zeros((0, 2))                  # [peak, (start, end)]
        self.mz_range = np.zeros((0, max_isotopes, 2))      # [peak, isotope, (start, end)]
        self.zero_areas = np.zeros(0)                       # [peak]
        self._signatures: list[tuple[float, bool, tuple[float, float, float, float]]] = []

        # [base isotope][base probe] -> candidate (peak, isotope) pairs
        self.overlaps: Optional[dict[int, dict[int, list[OverlapRef]]]] = None

    def __repr__(self) -> str:
        return (f"OverlapSpace(analyte_id={self.analyte_id!r}, n_peaks={self.n_peaks}, "
                f"affected_isotopes={self.affected_isotopes()})")

    # -------------------------------
    # Footprint of the candidate
    # -------------------------------

    def set_parameter_set(self, analyte: Analyte, distribution: IsotopeDistribution,
                          negative: Optional[bool] = None):
        """
        Set the ranges where the candidate can overlap with other analytes.

        Args:
            analyte: The potentially overlapping (candidate) analyte
            distribution: Theoretical isotope distribution of the candidate
            negative: Whether the envelope runs towards lower m/z;
                defaults to ``distribution.negative``
        """
        if negative is None:
            negative = distribution.negative
        self.negative = negative
        self.distribution = distribution
        self.overlaps = None

        zero_peaks = analyte.isotopes[0] if analyte.isotopes else []
        one_peaks = analyte.isotopes[1] if analyte.n_isotopes > 1 else []
        self.n_peaks = len(zero_peaks)
        self.n_isotopes = analyte.n_isotopes

        sign = -1.0 if negative else 1.0
        shifts = np.arange(self.max_isotopes) * self.config.neutron_mass * sign / abs(analyte.charge)

        self.time_range = np.zeros((self.n_peaks, 2))
        self.mz_range = np.zeros((self.n_peaks, self.max_isotopes, 2))
        self.zero_areas = np.zeros(self.n_peaks)
        self._signatures = []

        for nr, peak in enumerate(zero_peaks):
            self.time_range[nr] = peak.time_window()
            mz_start, mz_end = peak.mz_window()
            self.mz_range[nr, :, 0] = mz_start + shifts
            self.mz_range[nr, :, 1] = mz_end + shifts
            self.zero_areas[nr] = self._zero_area(peak, zero_peaks, one_peaks, distribution)
            self._signatures.append((peak.area, peak.has_ellipse, peak.geometry_parameters()))

    @staticmethod
    def _zero_area(peak: Peak, zero_peaks: list[Peak], one_peaks: list[Peak],
                   distribution: IsotopeDistribution) -> float:
        """Isotope-0 area, averaged with the estimate from isotope 1 when one is usable."""
        area = peak.area
        if not one_peaks or len(distribution) < 2 or distribution[1] <= 0:
            return area

        one_area = -1.0
        if len(zero_peaks) == 1 and len(one_peaks) == 1:
            one_area = one_peaks[0].area
        else:
            # the apex of the isotope-1 peak has to lie within the isotope-0 peak
            start, end = peak.time_window()
            for one in one_peaks:
                if start < one.apex < end:
                    one_area = one.area
                    break

        if one_area > 0:
            area = (area + one_area * distribution[0] / distribution[1]) / 2
        return area

    # -------------------------------
    # Overlap detection
    # -------------------------------

    def determine_overlapping_parts(self, base: Analyte) -> bool:
        """
        Find the peaks of ``base`` that fall into the candidate's footprint.

        Args:
            base: The analyte whose areas might contain signal of the candidate

        Returns:
            True if any peak of ``base`` overlaps
        """
        found = False
        overlaps: dict[int, dict[int, list[OverlapRef]]] = {}
        for iso, probes in enumerate(base.isotopes):
            iso_overlaps: dict[int, list[OverlapRef]] = {}
            for probe_nr, probe in enumerate(probes):
                matches = self._matches_of_probe(probe)
                if matches:
                    iso_overlaps[probe_nr] = matches
                    found = True
            if iso_overlaps:
                overlaps[iso] = iso_overlaps
        self.overlaps = overlaps
        return found

    def _matches_of_probe(self, probe: Peak) -> list[OverlapRef]:
        time_start, time_end = probe.time_window()
        mz_start, mz_end = probe.mz_window()

        matches: list[OverlapRef] = []
        for nr in range(self.n_peaks):
            # the time window is the same for every isotope of a peak
            if not is_within_range(time_start, time_end, float(self.time_range[nr, 0]), float(self.time_range[nr, 1])):
                continue
            same_peak = [(nr, j) for j in range(self.max_isotopes)
                         if is_within_range(mz_start, mz_end, float(self.mz_range[nr, j, 0]), float(self.mz_range[nr, j, 1]))]
            if self.config.use_most_overlapping_isotope_only and len(same_peak) > 1:
                same_peak = [self._most_overlapping(same_peak, mz_start, mz_end)]
            matches.extend(same_peak)
        return matches

    def _most_overlapping(self, candidates: list[OverlapRef], mz_start: float, mz_end: float) -> OverlapRef:
        best = candidates[0]
        highest = 0.0
        for nr, j in candidates:
            fraction = overlap_fraction(mz_start, mz_end, float(self.mz_range[nr, j, 0]), float(self.mz_range[nr, j, 1]))
            if fraction > highest:
                highest = fraction
                best = (nr, j)
        return best

    def has_overlap(self) -> bool:
        """Only meaningful after determine_overlapping_parts."""
        return bool(self.overlaps)

    def affected_isotopes(self) -> list[int]:
        """Isotopes of the base analyte that contain signal of the candidate."""
        if not self.overlaps:
            return []
        return sorted(self.overlaps)

    def overlaps_of_isotope(self, iso: int) -> dict[int, list[OverlapRef]]:
        if not self.overlaps:
            return {}
        return self.overlaps.get(iso, {})

    def overlaps_of(self, iso: int, probe_nr: int) -> list[OverlapRef]:
        return self.overlaps_of_isotope(iso).get(probe_nr, [])

    # -------------------------------
    # Area contribution
    # -------------------------------

    def other_isotope_area(self, iso: int, probe_nr: int) -> float:
        """
        Expected area of the candidate inside one peak of the base analyte.

        Each overlapping (peak, isotope) of the candidate contributes its
        zero-isotope area scaled by the isotope's relative abundance.
        Isotopes beyond the end of the distribution contribute nothing.
        """
        area = 0.0
        for nr, j in self.overlaps_of(iso, probe_nr):
            if j >= len(self.distribution):
                warnings.warn(
                    f"{self.analyte_id}: isotope distribution has {len(self.distribution)} entries, "
                    f"isotope {j} ignored (check the chemical formula)",
                    DistributionTruncationWarning,
                )
                continue
            area += float(self.zero_areas[nr]) * self.distribution.ratio(j)
        return area

    # -------------------------------
    # Duplicate detection
    # -------------------------------

    def is_the_same(self, other: 'OverlapSpace') -> bool:
        """
        Check if ``other`` describes the same physical peaks under a different name.

        Only the isotope-0 peaks are compared, since they alone define where
        an overlap can occur.
        """
        if other.n_isotopes != self.n_isotopes or other.n_peaks != self.n_peaks:
            return False
        return all(any(self._check_the_same(sig, own) for own in self._signatures)
                   for sig in other._signatures)

    def _check_the_same(self, sig1, sig2) -> bool:
        tolerance = self.config.same_peak_tolerance
        area1, ellipse1, params1 = sig1
        area2, ellipse2, params2 = sig2
        if ellipse1 != ellipse2:
            return False
        if not within_relative_tolerance(area1, area2, tolerance):
            return False
        return all(within_relative_tolerance(p1, p2, tolerance) for p1, p2 in zip(params1, params2))
