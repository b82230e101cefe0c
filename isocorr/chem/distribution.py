"""
Theoretical isotope distributions from chemical formulas.

Formulas are parsed with pyteomics and the element isotope abundances come
from ``pyteomics.mass.nist_mass``. Distributions are computed on nominal
mass offsets by convolving the isotope patterns of the individual atoms.
Labelled atoms (``D`` for deuterium, ``Cc`` for 13C, or any pyteomics
isotope notation such as ``N[15]``) are incompletely enriched, which
produces isotopologues below the monoisotopic mass; those analytes get a
negative envelope in addition to the positive one.
"""

import re
from functools import lru_cache
from typing import Optional

import numpy as np
from pyteomics import mass
from pyteomics.auxiliary import PyteomicsError

from isocorr.core.config import ISO_MAX_CORRECTION, LABEL_ENRICHMENT
from isocorr.core.datatypes import Analyte, IsotopeDistribution

# Lipid Data Analyzer shorthands for labelled atoms, in pyteomics notation
LABEL_ALIASES = {
    "D": "H[2]",
    "Cc": "C[13]",
}
LABEL_TOKEN = re.compile(r"(Cc|D)(?![a-z])")
ISOTOPE_KEY = re.compile(r"^([A-Z][a-z]*)(?:\[(\d+)\])?$")


def parse_formula(formula: str) -> dict[str, int]:
    """
    Parse a chemical formula such as ``C41H78NO8P`` into atom counts.

    Repeated elements are summed and whitespace is ignored. Labelled atoms
    are returned in pyteomics notation (``D3`` gives ``{'H[2]': 3}``).

    Raises:
        ValueError: On unparseable formulas and on unknown elements or isotopes
    """
    compact = "".join(formula.split())
    if not compact:
        raise ValueError("Empty chemical formula")

    translated = LABEL_TOKEN.sub(lambda m: LABEL_ALIASES[m.group(1)], compact)
    try:
        composition = mass.Composition(formula=translated)
    except PyteomicsError as exc:
        raise ValueError(f"Cannot parse chemical formula {formula}: {exc}") from exc

    counts = {key: int(n) for key, n in composition.items() if n}
    for key in counts:
        _split_isotope_key(key, formula)
    return counts


def _split_isotope_key(key: str, formula: str = "") -> tuple[str, Optional[int]]:
    """Element symbol and labelled mass number (None for natural abundance)."""
    match = ISOTOPE_KEY.match(key)
    if match is None or match.group(1) not in mass.nist_mass:
        raise ValueError(f"Unknown element '{key}' in formula {formula}")
    element, label = match.group(1), match.group(2)
    if label is not None and int(label) not in mass.nist_mass[element]:
        raise ValueError(f"Unknown isotope '{key}' in formula {formula}")
    return element, int(label) if label is not None else None


def _main_isotope(element: str) -> int:
    """Mass number of the most abundant isotope of an element."""
    isotopes = {k: v for k, v in mass.nist_mass[element].items() if k}
    if not isotopes:
        return 0
    return max(isotopes, key=lambda k: isotopes[k][1])


@lru_cache(maxsize=256)
def _atom_pattern(key: str, enrichment: float) -> dict[int, float]:
    """Abundances by nominal offset for one atom of ``key``."""
    element, label = _split_isotope_key(key)
    main = _main_isotope(element)

    if label is None:
        return {k - main: abundance
                for k, (_, abundance) in mass.nist_mass[element].items()
                if k and abundance > 0} or {0: 1.0}

    # the unlabelled remainder sits at the natural main isotope
    if label == main or enrichment >= 1.0:
        return {0: 1.0}
    return {0: enrichment, main - label: 1.0 - enrichment}


def _pattern_array(pattern: dict[int, float]) -> tuple[np.ndarray, int]:
    """Abundance array of one atom and the offset of its first entry."""
    lo, hi = min(pattern), max(pattern)
    arr = np.zeros(hi - lo + 1)
    for offset, abundance in pattern.items():
        arr[offset - lo] = abundance
    return arr, lo


def _power(arr: np.ndarray, lo: int, n: int) -> tuple[np.ndarray, int]:
    """n-fold self convolution by repeated squaring."""
    result, result_lo = np.array([1.0]), 0
    base, base_lo = arr, lo
    while n:
        if n & 1:
            result, result_lo = np.convolve(result, base), result_lo + base_lo
        n >>= 1
        if n:
            base, base_lo = np.convolve(base, base), 2 * base_lo
    return result, result_lo


def _envelope(counts: dict[str, int], enrichment: float) -> tuple[np.ndarray, int]:
    total, total_lo = np.array([1.0]), 0
    for key, n in counts.items():
        if n <= 0:
            continue
        arr, lo = _pattern_array(_atom_pattern(key, enrichment))
        powered, powered_lo = _power(arr, lo, n)
        total, total_lo = np.convolve(total, powered), total_lo + powered_lo
    return total, total_lo


def _normalised(values: np.ndarray, n_isotopes: int) -> tuple[float, ...]:
    out = np.zeros(n_isotopes)
    n = min(n_isotopes, len(values))
    out[:n] = values[:n]
    return tuple(float(v) for v in out / out[0])


def calculate_distributions(formula: str, n_isotopes: int = ISO_MAX_CORRECTION,
                            enrichment: float = LABEL_ENRICHMENT) -> list[tuple[float, ...]]:
    """
    Compute the isotope envelope(s) of a chemical formula.

    Args:
        formula: Chemical formula
        n_isotopes: Number of isotopes (including the monoisotopic one)
        enrichment: Isotopic purity of labelled atoms

    Returns:
        ``[positive]`` or ``[positive, negative]``; each envelope is
        normalised to 1.0 at index 0. The negative envelope lists the
        abundances at M, M-1, M-2, ... and is only present for formulas
        with labelled atoms.
    """
    if n_isotopes < 1:
        raise ValueError(f"n_isotopes must be at least 1, got {n_isotopes}")
    envelope, lo = _envelope(parse_formula(formula), enrichment)
    origin = -lo

    distributions = [_normalised(envelope[origin:], n_isotopes)]
    if lo < 0:
        distributions.append(_normalised(envelope[origin::-1], n_isotopes))
    return distributions


def use_negative_distribution(positive: tuple[float, ...], negative: tuple[float, ...]) -> bool:
    return negative[1] > positive[1]


def distribution_for_formula(formula: str, n_isotopes: int = ISO_MAX_CORRECTION,
                             enrichment: float = LABEL_ENRICHMENT) -> IsotopeDistribution:
    """Distribution of the dominant direction of a formula's envelope."""
    distributions = calculate_distributions(formula, n_isotopes, enrichment)
    positive = distributions[0]
    if len(distributions) > 1 and n_isotopes > 1 and use_negative_distribution(positive, distributions[1]):
        return IsotopeDistribution(distributions[1], negative=True)
    return IsotopeDistribution(positive)


class FormulaDistributionSource:
    """
    Supplies the isotope distribution of an analyte from its chemical formula.

    Distributions are cached per formula.
    """

    def __init__(self, n_isotopes: int = ISO_MAX_CORRECTION, enrichment: float = LABEL_ENRICHMENT):
        self.n_isotopes = n_isotopes
        self.enrichment = enrichment
        self._lookup = lru_cache(maxsize=1024)(self._compute)

    def _compute(self, formula: str) -> IsotopeDistribution:
        return distribution_for_formula(formula, self.n_isotopes, self.enrichment)

    def __call__(self, analyte: Analyte) -> IsotopeDistribution:
        formula: Optional[str] = analyte.formula
        if not formula:
            raise ValueError(f"Analyte {analyte.analyte_id} has no chemical formula")
        return self._lookup(formula)
