from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
import pandas as pd

# -------------------------------#
# Peak geometry                --#
# -------------------------------#

@dataclass(frozen=True)
class Ellipse:
    """Elliptical peak region in the retention-time / m/z plane."""
    time_center: float
    time_half_width: float
    mz_center: float
    mz_half_width: float


@dataclass
class Peak:
    """
    One chromatographic peak of one isotope of an analyte.

    The rectangular model is the valley-to-valley time window combined with
    the m/z band around ``mz``. When an ellipse is attached, the windows are
    taken from the ellipse instead.
    """
    area: float
    time_lower: float                  # lower valley (min)
    time_upper: float                  # upper valley (min)
    mz: float
    mz_lower_band: float
    mz_upper_band: float
    apex_time: Optional[float] = None  # chromatographic apex (min)
    ellipse: Optional[Ellipse] = None

    @property
    def has_ellipse(self) -> bool:
        return self.ellipse is not None

    @property
    def apex(self) -> float:
        if self.apex_time is not None:
            return self.apex_time
        start, end = self.time_window()
        return (start + end) / 2

    def time_window(self) -> tuple[float, float]:
        if self.ellipse is not None:
            e = self.ellipse
            return e.time_center - e.time_half_width, e.time_center + e.time_half_width
        return self.time_lower, self.time_upper

    def mz_window(self) -> tuple[float, float]:
        if self.ellipse is not None:
            e = self.ellipse
            return e.mz_center - e.mz_half_width, e.mz_center + e.mz_half_width
        return self.mz - self.mz_lower_band, self.mz + self.mz_upper_band

    def geometry_parameters(self) -> tuple[float, float, float, float]:
        """The four shape parameters compared when looking for duplicate peaks."""
        if self.ellipse is not None:
            e = self.ellipse
            return e.mz_center, e.mz_half_width, e.time_center, e.time_half_width
        return self.time_lower, self.time_upper, self.mz_lower_band, self.mz_upper_band


# -------------------------------#
# Analytes                     --#
# -------------------------------#

@dataclass
class Analyte:
    """Quantified lipid species: peaks per isotope plus the summed area."""
    name: str
    group: str
    mz: float                                       # isotope-0 m/z
    isotopes: list[list[Peak]]                      # [isotope][probe]
    charge: int = 1
    formula: Optional[str] = None
    area: Optional[float] = None

    def __post_init__(self):
        if self.charge == 0:
            raise ValueError(f"Analyte {self.name} has charge 0")
        if self.area is None:
            self.recompute_area()

    @property
    def analyte_id(self) -> str:
        return unique_id(self.group, self.name)

    @property
    def n_isotopes(self) -> int:
        return len(self.isotopes)

    @property
    def n_peaks(self) -> int:
        """Number of isotope-0 peaks."""
        return len(self.isotopes[0]) if self.isotopes else 0

    def recompute_area(self) -> float:
        self.area = float(sum(p.area for peaks in self.isotopes for p in peaks))
        return self.area

    def isotope_areas(self) -> list[float]:
        return [float(sum(p.area for p in peaks)) for peaks in self.isotopes]

    def is_same_species(self, other: Analyte) -> bool:
        return (self.group.lower() == other.group.lower()
                and self.name.lower() == other.name.lower())


def unique_id(group: str, name: str) -> str:
    return f"{group}_-{name}"


@dataclass(frozen=True)
class IsotopeDistribution:
    """
    Theoretical relative isotope abundances of a chemical formula.

    Index 0 is the normalising reference and must be positive. ``negative``
    marks envelopes that extend towards lower m/z.
    """
    values: tuple[float, ...]
    negative: bool = False

    def __post_init__(self):
        values = tuple(float(v) for v in self.values)
        object.__setattr__(self, 'values', values)
        if not values:
            raise ValueError("Isotope distribution is empty")
        if values[0] <= 0:
            raise ValueError(f"Isotope distribution must start with a positive value, got {values[0]}")
        if any(v < 0 or not np.isfinite(v) for v in values):
            raise ValueError(f"Isotope distribution contains invalid values: {values}")

    @classmethod
    def from_values(cls, values: Sequence[float], negative: bool = False) -> IsotopeDistribution:
        return cls(tuple(values), negative)

    def __len__(self):
        return len(self.values)

    def __getitem__(self, index: int) -> float:
        return self.values[index]

    def ratio(self, isotope: int) -> float:
        """Abundance of ``isotope`` relative to isotope 0."""
        return self.values[isotope] / self.values[0]


# -------------------------------#
# Resolution bookkeeping       --#
# -------------------------------#

@dataclass
class ResolutionLedger:
    """Analytes that are final for the current correction run."""
    corrected: dict[str, Analyte] = field(default_factory=dict)
    removed: set[str] = field(default_factory=set)

    def is_resolved(self, analyte_id: str) -> bool:
        return analyte_id in self.corrected

    def is_explicitly_removed(self, analyte_id: str) -> bool:
        return analyte_id in self.removed

    def mark_corrected(self, analyte: Analyte):
        self.corrected[analyte.analyte_id] = analyte

    def mark_removed(self, analyte_id: str):
        self.removed.add(analyte_id)

    def __contains__(self, analyte_id: str) -> bool:
        return self.is_resolved(analyte_id) or self.is_explicitly_removed(analyte_id)


@dataclass
class CorrectionResult:
    corrected: dict[str, list[Analyte]]
    removed: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    n_rounds: int = 0

    def summary(self) -> dict[str, int]:
        return {
            'kept': sum(len(mols) for mols in self.corrected.values()),
            'removed': len(self.removed),
            'unresolved': len(self.unresolved),
            'rounds': self.n_rounds,
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per kept analyte with its total and per-isotope areas."""
        rows = []
        for group, mols in self.corrected.items():
            for mol in mols:
                row = {
                    'group': group,
                    'name': mol.name,
                    'mz': mol.mz,
                    'status': 'unresolved' if mol.analyte_id in self.unresolved else 'corrected',
                    'area': mol.area,
                }
                for iso, area in enumerate(mol.isotope_areas()):
                    row[f'area_iso{iso}'] = area
                rows.append(row)
        return pd.DataFrame(rows)

    def __repr__(self) -> str:
        s = self.summary()
        return (f"CorrectionResult(kept={s['kept']}, removed={s['removed']}, "
                f"unresolved={s['unresolved']}, rounds={s['rounds']})")
