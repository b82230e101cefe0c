from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

import yaml

# -------------------------------
# Physical constants
# -------------------------------
NEUTRON_MASS = 1.005               # (Da) nominal isotope spacing used for m/z shifts

# -------------------------------
# Correction defaults
# -------------------------------
ISO_MAX_CORRECTION = 5             # isotopes of a candidate envelope taken into account
COARSE_CHROM_MZ_TOLERANCE = 0.02   # (Da) tolerance for the candidate m/z prefilter
SAME_PEAK_TOLERANCE = 0.01         # relative tolerance for duplicate overlap detection
LABEL_ENRICHMENT = 0.99            # isotopic purity of labelled atoms (D, Cc)

CONFIG_SECTION = "isotope_correction"


@dataclass(frozen=True)
class CorrectionConfig:
    neutron_mass: float = NEUTRON_MASS
    max_isotopes: int = ISO_MAX_CORRECTION
    coarse_mz_tolerance: float = COARSE_CHROM_MZ_TOLERANCE
    use_most_overlapping_isotope_only: bool = False   # collapse matches to the best m/z intersection
    same_peak_tolerance: float = SAME_PEAK_TOLERANCE
    rt_tolerance: Optional[float] = None               # (min) optional RT prefilter; None = m/z only
    label_enrichment: float = LABEL_ENRICHMENT
    verbose: bool = True

    def __post_init__(self):
        if self.neutron_mass <= 0:
            raise ValueError(f"neutron_mass must be positive, got {self.neutron_mass}")
        if self.max_isotopes < 1:
            raise ValueError(f"max_isotopes must be at least 1, got {self.max_isotopes}")
        if self.coarse_mz_tolerance < 0:
            raise ValueError(f"coarse_mz_tolerance must not be negative, got {self.coarse_mz_tolerance}")
        if not 0 <= self.same_peak_tolerance < 1:
            raise ValueError(f"same_peak_tolerance must be in [0, 1), got {self.same_peak_tolerance}")
        if not 0 < self.label_enrichment <= 1:
            raise ValueError(f"label_enrichment must be in (0, 1], got {self.label_enrichment}")
        if self.rt_tolerance is not None and self.rt_tolerance < 0:
            raise ValueError(f"rt_tolerance must not be negative, got {self.rt_tolerance}")


def with_overrides(config: CorrectionConfig, **overrides) -> CorrectionConfig:
    """Return a copy of config with the given fields replaced."""
    return replace(config, **overrides)


def config_from_dict(values: Optional[dict]) -> CorrectionConfig:
    """
    Build a CorrectionConfig from a plain mapping.

    Accepts either the section itself or a full document containing an
    ``isotope_correction`` section. Unknown keys are rejected so that typos
    in config files do not pass silently.
    """
    if not values:
        return CorrectionConfig()
    if CONFIG_SECTION in values:
        values = values[CONFIG_SECTION] or {}

    known = {f.name for f in fields(CorrectionConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown isotope correction settings: {unknown}")
    return CorrectionConfig(**values)


def load_config(config_path: Union[str, Path]) -> CorrectionConfig:
    """Load YAML configuration file."""
    with open(config_path, 'r') as f:
        return config_from_dict(yaml.safe_load(f))
