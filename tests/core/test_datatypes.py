"""
Tests for the data model.
"""

import pytest
import pandas as pd

from isocorr.core.datatypes import (
    Analyte,
    CorrectionResult,
    Ellipse,
    IsotopeDistribution,
    Peak,
    ResolutionLedger,
    unique_id,
)


class TestPeakGeometry:
    """Both peak representations expose the same windows."""

    def test_rectangular_windows(self):
        peak = Peak(area=10.0, time_lower=5.0, time_upper=5.6, mz=700.0,
                    mz_lower_band=0.01, mz_upper_band=0.02)
        assert not peak.has_ellipse
        assert peak.time_window() == (5.0, 5.6)
        assert peak.mz_window() == pytest.approx((699.99, 700.02))
        assert peak.geometry_parameters() == (5.0, 5.6, 0.01, 0.02)

    def test_elliptical_windows_take_precedence(self):
        peak = Peak(area=10.0, time_lower=5.0, time_upper=5.6, mz=700.0,
                    mz_lower_band=0.01, mz_upper_band=0.02,
                    ellipse=Ellipse(time_center=5.2, time_half_width=0.1,
                                    mz_center=700.001, mz_half_width=0.005))
        assert peak.has_ellipse
        assert peak.time_window() == pytest.approx((5.1, 5.3))
        assert peak.mz_window() == pytest.approx((699.996, 700.006))
        assert peak.geometry_parameters() == (700.001, 0.005, 5.2, 0.1)

    def test_apex_defaults_to_window_centre(self):
        peak = Peak(area=1.0, time_lower=5.0, time_upper=6.0, mz=700.0,
                    mz_lower_band=0.01, mz_upper_band=0.01)
        assert peak.apex == pytest.approx(5.5)
        peak.apex_time = 5.2
        assert peak.apex == 5.2


class TestAnalyte:

    def test_area_computed_from_peaks(self, make_analyte):
        mol = make_analyte("PC 34:1", 760.585, [[1000.0, 100.0], 400.0])
        assert mol.area == pytest.approx(1500.0)
        assert mol.isotope_areas() == pytest.approx([1100.0, 400.0])
        assert mol.n_isotopes == 2
        assert mol.n_peaks == 2

    def test_unique_id_contains_group(self, make_analyte):
        mol = make_analyte("34:1", 760.585, [1000.0], group="PC")
        assert mol.analyte_id == "PC_-34:1" == unique_id("PC", "34:1")

    def test_same_species_ignores_case(self, make_analyte):
        a = make_analyte("34:1", 760.585, [1.0], group="PC")
        b = make_analyte("34:1", 760.585, [1.0], group="pc")
        c = make_analyte("34:1", 760.585, [1.0], group="PE")
        assert a.is_same_species(b)
        assert not a.is_same_species(c)

    def test_zero_charge_rejected(self):
        with pytest.raises(ValueError, match="charge 0"):
            Analyte(name="X", group="PC", mz=700.0, isotopes=[], charge=0)


class TestIsotopeDistribution:

    def test_sequence_access(self):
        d = IsotopeDistribution.from_values([2.0, 0.5, 0.1])
        assert len(d) == 3
        assert d[1] == 0.5
        assert d.ratio(1) == pytest.approx(0.25)
        assert not d.negative

    @pytest.mark.parametrize("values", [(), (0.0, 0.3), (1.0, -0.1), (1.0, float("nan"))])
    def test_invalid_values_rejected(self, values):
        with pytest.raises(ValueError):
            IsotopeDistribution(values)


class TestLedgerAndResult:

    def test_ledger_membership(self, make_analyte):
        ledger = ResolutionLedger()
        mol = make_analyte("A", 700.0, [1.0])
        ledger.mark_corrected(mol)
        ledger.mark_removed("PC_-B")
        assert ledger.is_resolved(mol.analyte_id)
        assert ledger.is_explicitly_removed("PC_-B")
        assert not ledger.is_resolved("PC_-B")
        assert "PC_-B" in ledger and mol.analyte_id in ledger
        assert "PC_-C" not in ledger

    def test_result_frame(self, make_analyte):
        a = make_analyte("A", 700.0, [100.0, 20.0])
        b = make_analyte("B", 710.0, [50.0])
        result = CorrectionResult(corrected={"PC": [a, b]}, unresolved=[b.analyte_id], n_rounds=1)
        frame = result.to_frame()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame["status"]) == ["corrected", "unresolved"]
        assert frame.loc[0, "area_iso1"] == pytest.approx(20.0)
        assert result.summary() == {'kept': 2, 'removed': 0, 'unresolved': 1, 'rounds': 1}
