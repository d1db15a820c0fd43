"""Tabular output of duplication metrics and set-size histograms.

The file holds two tab-separated tables, each introduced by a ``##`` line:

    ## METRICS
    LIBRARY  UNPAIRED_READS_EXAMINED  ...
    <one row>

    ## HISTOGRAM
    set_size  all_sets  non_optical_sets  optical_sets
    ...
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Mapping, Optional, Tuple

import pandas as pd

from dupseeker.__version__ import __version__
from dupseeker.core.histogram import SetSizeHistogram, histograms_to_dataframe
from dupseeker.core.metrics import DuplicationMetrics, metrics_to_dataframe
from dupseeker.exceptions import FileFormatError
from dupseeker.utils.logging import LogTemplates, get_logger

METRICS_SECTION = "## METRICS"
HISTOGRAM_SECTION = "## HISTOGRAM"


def write_metrics(
    path: Path,
    metrics: DuplicationMetrics,
    histograms: Mapping[str, SetSizeHistogram],
    logger: Optional[logging.Logger] = None,
) -> Path:
    """Write one metrics row and the histogram table to ``path``."""
    logger = logger or get_logger("metrics_writer")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as handle:
        handle.write(f"## DupSeeker {__version__}\n")
        handle.write(f"{METRICS_SECTION}\n")
        metrics_to_dataframe([metrics]).to_csv(handle, sep="\t", index=False, na_rep="")
        handle.write("\n")
        histogram_df = histograms_to_dataframe(histograms)
        if not histogram_df.empty:
            handle.write(f"{HISTOGRAM_SECTION}\n")
            histogram_df.to_csv(handle, sep="\t", index=False)

    logger.info(LogTemplates.METRICS_WRITTEN.format(path=path))
    return path


def read_metrics(path: Path) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Read back a file produced by ``write_metrics``.

    Returns:
        (metrics table, histogram table); the histogram table is empty when
        the run had no duplicate sets.
    """
    sections = {METRICS_SECTION: [], HISTOGRAM_SECTION: []}
    current = None
    with open(path, "r", encoding="utf-8") as handle:
        for line in handle:
            stripped = line.rstrip("\n")
            if stripped in sections:
                current = stripped
            elif not stripped or stripped.startswith("##"):
                current = None
            elif current is not None:
                sections[current].append(line)

    if not sections[METRICS_SECTION]:
        raise FileFormatError(f"No metrics section found in {path}")

    metrics_df = pd.read_csv(io.StringIO("".join(sections[METRICS_SECTION])), sep="\t")
    if sections[HISTOGRAM_SECTION]:
        histogram_df = pd.read_csv(io.StringIO("".join(sections[HISTOGRAM_SECTION])), sep="\t")
    else:
        histogram_df = pd.DataFrame()
    return metrics_df, histogram_df
