import pandas as pd
from pathlib import Path
from typing import Optional, Union

from .datatypes import Analyte, CorrectionResult, Ellipse, Peak

PathLike = Union[str, Path]

PEAK_COLUMNS = ['group', 'name', 'mz', 'isotope', 'area',
                'time_lower', 'time_upper', 'peak_mz', 'mz_lower_band', 'mz_upper_band']
ELLIPSE_COLUMNS = ['ellipse_time_center', 'ellipse_time_half_width',
                   'ellipse_mz_center', 'ellipse_mz_half_width']

# ----------------------------------------
# --- Peak table loading             -----
# ----------------------------------------

def _optional(row: pd.Series, column: str):
    if column not in row.index or pd.isna(row[column]):
        return None
    return row[column]


def _peak_from_row(row: pd.Series) -> Peak:
    ellipse = None
    if all(_optional(row, c) is not None for c in ELLIPSE_COLUMNS):
        ellipse = Ellipse(*(float(row[c]) for c in ELLIPSE_COLUMNS))
    apex = _optional(row, 'apex_time')
    return Peak(
        area=float(row['area']),
        time_lower=float(row['time_lower']),
        time_upper=float(row['time_upper']),
        mz=float(row['peak_mz']),
        mz_lower_band=float(row['mz_lower_band']),
        mz_upper_band=float(row['mz_upper_band']),
        apex_time=float(apex) if apex is not None else None,
        ellipse=ellipse,
    )


def _analyte_from_rows(group: str, name: str, rows: pd.DataFrame) -> Analyte:
    first = rows.iloc[0]
    isotope_numbers = sorted(int(i) for i in rows['isotope'].unique())
    if isotope_numbers != list(range(len(isotope_numbers))):
        raise ValueError(f"Analyte {group}/{name}: isotopes must run from 0 without gaps, got {isotope_numbers}")

    isotopes = []
    for iso in isotope_numbers:
        iso_rows = rows[rows['isotope'] == iso]
        isotopes.append([_peak_from_row(row) for _, row in iso_rows.iterrows()])

    charge = _optional(first, 'charge')
    formula = _optional(first, 'formula')
    return Analyte(
        name=str(name),
        group=str(group),
        mz=float(first['mz']),
        isotopes=isotopes,
        charge=int(charge) if charge is not None else 1,
        formula=str(formula) if formula is not None else None,
    )


def load_peak_table(path: PathLike) -> dict[str, list[Analyte]]:
    """
    Load quantified peaks from a CSV file, one row per peak.

    Required columns are listed in ``PEAK_COLUMNS``. Optional columns:
    ``charge``, ``formula``, ``apex_time`` and the four ``ELLIPSE_COLUMNS``
    (a peak gets an ellipse only when all four are filled in). Analytes keep
    the order of their first appearance in the file.

    Returns:
        Analytes per group
    """
    df = pd.read_csv(path)
    missing = [c for c in PEAK_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Peak table {path} lacks columns: {missing}")

    groups: dict[str, list[Analyte]] = {}
    for (group, name), rows in df.groupby(['group', 'name'], sort=False):
        groups.setdefault(str(group), []).append(_analyte_from_rows(group, name, rows))
    return groups


# ----------------------------------------
# --- Result storing                 -----
# ----------------------------------------

def store_correction_result(result: CorrectionResult, path: PathLike,
                            removed_path: Optional[PathLike] = None) -> None:
    """
    Write the corrected areas to CSV (one row per kept analyte).

    Args:
        result: Outcome of a correction run
        path: Output CSV for the kept analytes
        removed_path: Optional CSV listing the ids of removed analytes
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    result.to_frame().to_csv(path, index=False)
    print(f"  → Saved: {path}")

    if removed_path is not None:
        removed_path = Path(removed_path)
        removed_path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame({'analyte_id': result.removed}).to_csv(removed_path, index=False)
        print(f"  → Saved: {removed_path}")
