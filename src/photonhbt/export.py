"""Tabular views of histogram-sink content."""

from __future__ import annotations

from typing import Any

from .histograms import HistogramSink
from .models import PairKind


def slot_summary_dataframe(sink: HistogramSink):
    """One row per registered slot with same-event and mixed-event pair counts."""
    pd = _require_pandas()
    return pd.DataFrame(_slot_rows(sink), columns=["pair_type", "cut1", "cut2", "n_same", "n_mixed"])


def event_counter_dataframe(sink: HistogramSink):
    """One row per pair type with the event-selection counters as columns."""
    pd = _require_pandas()
    rows: list[dict[str, Any]] = []
    for pair_type in sink.event_pair_types():
        row: dict[str, Any] = {"pair_type": pair_type.name}
        row.update(sink.event_counts(pair_type))
        rows.append(row)
    return pd.DataFrame(rows)


def fill_log_dataframe(sink: HistogramSink):
    """Recorded pair fills, one row each (requires `record_fills=True`)."""
    if not sink.record_fills:
        raise ValueError("Histogram sink was created without record_fills=True.")
    pd = _require_pandas()
    rows = [
        {
            "pair_type": rec.pair_type.name,
            "cut1": rec.cut1_name,
            "cut2": rec.cut2_name,
            "kind": rec.kind.value,
            "qinv": rec.values[0],
            "qlong": rec.values[1],
            "qout": rec.values[2],
            "qside": rec.values[3],
            "kt": rec.values[4],
        }
        for rec in sink.fill_log
    ]
    return pd.DataFrame(rows, columns=["pair_type", "cut1", "cut2", "kind", "qinv", "qlong", "qout", "qside", "kt"])


def _slot_rows(sink: HistogramSink) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for pair_type, cut1, cut2 in sink.slot_keys():
        rows.append(
            {
                "pair_type": pair_type.name,
                "cut1": cut1,
                "cut2": cut2,
                "n_same": sink.n_pairs(pair_type, cut1, cut2, PairKind.SAME),
                "n_mixed": sink.n_pairs(pair_type, cut1, cut2, PairKind.MIXED),
            }
        )
    return rows


def _require_pandas():
    """Import pandas lazily and provide a clear installation hint on failure."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required for tabular output. Install pandas."
        ) from exc
    return pd
