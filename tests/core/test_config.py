"""
Tests for configuration handling.
"""

import pytest

from isocorr.core.config import (
    CorrectionConfig,
    NEUTRON_MASS,
    ISO_MAX_CORRECTION,
    config_from_dict,
    load_config,
    with_overrides,
)


def test_defaults():
    config = CorrectionConfig()
    assert config.neutron_mass == NEUTRON_MASS
    assert config.max_isotopes == ISO_MAX_CORRECTION
    assert config.use_most_overlapping_isotope_only is False
    assert config.rt_tolerance is None


def test_with_overrides_keeps_original():
    config = CorrectionConfig()
    other = with_overrides(config, use_most_overlapping_isotope_only=True)
    assert other.use_most_overlapping_isotope_only
    assert not config.use_most_overlapping_isotope_only


@pytest.mark.parametrize("kwargs", [
    {"neutron_mass": 0.0},
    {"max_isotopes": 0},
    {"coarse_mz_tolerance": -0.1},
    {"same_peak_tolerance": 1.5},
    {"rt_tolerance": -1.0},
    {"label_enrichment": 0.0},
    {"label_enrichment": 1.2},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        CorrectionConfig(**kwargs)


def test_load_yaml_section(tmp_path):
    path = tmp_path / "analysis.yaml"
    path.write_text(
        "run_id: test\n"
        "isotope_correction:\n"
        "  neutron_mass: 1.00335\n"
        "  max_isotopes: 3\n"
        "  use_most_overlapping_isotope_only: true\n"
        "  verbose: false\n"
    )
    config = load_config(path)
    assert config.neutron_mass == pytest.approx(1.00335)
    assert config.max_isotopes == 3
    assert config.use_most_overlapping_isotope_only
    assert not config.verbose


def test_empty_document_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == CorrectionConfig()


def test_unknown_keys_rejected():
    with pytest.raises(ValueError, match="Unknown isotope correction settings"):
        config_from_dict({"isotope_correction": {"neutron_mas": 1.0}})
