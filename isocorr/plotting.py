from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt # type: ignore
from matplotlib.patches import Rectangle # type: ignore

from isocorr.core.datatypes import Analyte
from isocorr.overlap.space import OverlapSpace

# --------------------------------
# Overlap footprint plotter
# --------------------------------

def plot_overlap_space(space: OverlapSpace, base: Analyte, ax=None,
                       title: Optional[str] = None,
                       candidate_color: str = "tab:orange",
                       base_color: str = "tab:blue",
                       overlap_color: str = "tab:red"):
    """
    Plot the candidate footprint and the peaks of the base analyte in the RT / m/z plane.

    Candidate windows are drawn per isotope; base peaks that overlap the
    candidate are highlighted.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 6))

    for nr in range(space.n_peaks):
        t_start, t_end = space.time_range[nr]
        for j in range(space.max_isotopes):
            mz_start, mz_end = space.mz_range[nr, j]
            ax.add_patch(Rectangle((t_start, mz_start), t_end - t_start, mz_end - mz_start,
                                   fill=False, edgecolor=candidate_color, lw=1.2, linestyle='--'))
            ax.annotate(f"{nr}_{j}", (t_end, mz_end), fontsize=7, color=candidate_color)

    for iso, peaks in enumerate(base.isotopes):
        for probe_nr, peak in enumerate(peaks):
            t_start, t_end = peak.time_window()
            mz_start, mz_end = peak.mz_window()
            hit = bool(space.overlaps_of(iso, probe_nr))
            ax.add_patch(Rectangle((t_start, mz_start), t_end - t_start, mz_end - mz_start,
                                   alpha=0.35, color=overlap_color if hit else base_color))

    ax.autoscale_view()
    title = title or f"{base.analyte_id} overlapped by {space.analyte_id}"
    ax.set(title=title, xlabel="Retention time (min)", ylabel="m/z")
    ax.grid(True)
    return ax


def save_figure(fig, filename: Union[str, Path], dpi: int = 150) -> None:
    """
    Save matplotlib figure to disk.

    Args:
        fig: Matplotlib figure
        filename: Output path
        dpi: Resolution for raster formats
    """
    filename = Path(filename)
    filename.parent.mkdir(parents=True, exist_ok=True)

    fig.savefig(filename, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
    print(f"  → Saved: {filename}")
