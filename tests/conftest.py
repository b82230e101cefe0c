"""
Shared pytest fixtures for all test modules.
"""

import pytest

from isocorr.core.config import CorrectionConfig, NEUTRON_MASS
from isocorr.core.datatypes import Analyte, Ellipse, IsotopeDistribution, Peak


def _make_peak(area, mz, rt=(10.0, 10.4), band=0.01, apex=None, ellipse=False):
    """Peak centred on ``mz``; optionally with an ellipse of the same extent."""
    shape = None
    if ellipse:
        shape = Ellipse(
            time_center=(rt[0] + rt[1]) / 2,
            time_half_width=(rt[1] - rt[0]) / 2,
            mz_center=mz,
            mz_half_width=band,
        )
    return Peak(area=area, time_lower=rt[0], time_upper=rt[1], mz=mz,
                mz_lower_band=band, mz_upper_band=band, apex_time=apex, ellipse=shape)


def _make_analyte(name, mz, areas, group="PC", rt=(10.0, 10.4), band=0.01,
                  charge=1, formula=None, ellipse=False, neutron_mass=NEUTRON_MASS):
    """
    Analyte with one peak per isotope, or several when an isotope entry is a list.

    Isotope ``i`` is placed at ``mz + i * neutron_mass / charge``.
    """
    isotopes = []
    for i, entry in enumerate(areas):
        iso_areas = entry if isinstance(entry, (list, tuple)) else [entry]
        iso_mz = mz + i * neutron_mass / charge
        isotopes.append([_make_peak(a, iso_mz, rt=rt, band=band, ellipse=ellipse) for a in iso_areas])
    return Analyte(name=name, group=group, mz=mz, isotopes=isotopes, charge=charge, formula=formula)


@pytest.fixture
def make_peak():
    return _make_peak


@pytest.fixture
def make_analyte():
    return _make_analyte


@pytest.fixture
def config():
    """Default settings without console output."""
    return CorrectionConfig(verbose=False)


@pytest.fixture
def distribution():
    return IsotopeDistribution((1.0, 0.3))


@pytest.fixture
def long_distribution():
    return IsotopeDistribution((1.0, 0.3, 0.05))


@pytest.fixture
def scenario_pair(make_analyte):
    """
    A (isotopes 0 and 1 with areas 1000 and 200) and B (isotope 0 with area 500)
    sharing the same position, so B's envelope covers A's isotopes.
    """
    a = make_analyte("A", 700.0, [1000.0, 200.0])
    b = make_analyte("B", 700.0, [500.0])
    return a, b
