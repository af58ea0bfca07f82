"""Histogram sink for photon-pair observables and event counters.

Slots are registered once per `(pair_type, cut1_name, cut2_name)` before any
fill. Every slot owns two 5D histograms, one for same-event and one for
mixed-event pairs, with axes `(qinv, qlong, qout, qside, kt)`. Each pair type
also owns an event counter and z-vertex histograms before/after the vertex
window.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import hist

from .models import CorrelationObservables, PairKind, PairType

logger = logging.getLogger(__name__)

EVENT_COUNTER_LABELS: tuple[str, ...] = ("all", "sel8", "numContrib", "zvtx")

SlotKey = tuple[PairType, str, str]


@dataclass(frozen=True)
class PairHistogramBinning:
    """Axis definitions of the 5D pair histograms."""

    qinv: tuple[int, float, float] = (10, 0.0, 0.3)
    qlong: tuple[int, float, float] = (10, -0.3, 0.3)
    qout: tuple[int, float, float] = (10, -0.3, 0.3)
    qside: tuple[int, float, float] = (10, -0.3, 0.3)
    kt_edges: Sequence[float] = (0.0, 0.2, 0.4, 0.6, 1.0, 2.0)

    def make_hist(self) -> hist.Hist:
        """Book one empty 5D histogram."""
        return hist.Hist(
            hist.axis.Regular(*self.qinv, name="qinv", label="q_{inv} (GeV/c)"),
            hist.axis.Regular(*self.qlong, name="qlong", label="q_{long} (GeV/c)"),
            hist.axis.Regular(*self.qout, name="qout", label="q_{out} (GeV/c)"),
            hist.axis.Regular(*self.qside, name="qside", label="q_{side} (GeV/c)"),
            hist.axis.Variable(list(self.kt_edges), name="kt", label="k_{T} (GeV/c)"),
        )


@dataclass
class PairSlot:
    """Same-event and mixed-event histograms of one cut pair."""

    same: hist.Hist
    mix: hist.Hist

    def for_kind(self, kind: PairKind) -> hist.Hist:
        return self.same if kind is PairKind.SAME else self.mix


@dataclass
class EventHistograms:
    """Event-level bookkeeping of one pair type."""

    counter: hist.Hist
    zvtx_before: hist.Hist
    zvtx_after: hist.Hist

    @classmethod
    def book(cls) -> "EventHistograms":
        return cls(
            counter=hist.Hist(hist.axis.StrCategory(list(EVENT_COUNTER_LABELS), name="counter")),
            zvtx_before=hist.Hist(hist.axis.Regular(100, -50.0, 50.0, name="zvtx", label="z_{vtx} (cm)")),
            zvtx_after=hist.Hist(hist.axis.Regular(100, -50.0, 50.0, name="zvtx", label="z_{vtx} (cm)")),
        )


@dataclass(frozen=True)
class FillRecord:
    """One recorded pair fill."""

    pair_type: PairType
    cut1_name: str
    cut2_name: str
    kind: PairKind
    values: tuple[float, float, float, float, float]


@dataclass
class HistogramSink:
    """Pre-registered output histograms with a fixed fill contract.

    Set `record_fills=True` to additionally keep the ordered sequence of pair
    fills in `fill_log`.
    """

    binning: PairHistogramBinning = field(default_factory=PairHistogramBinning)
    record_fills: bool = False
    fill_log: list[FillRecord] = field(default_factory=list)
    _slots: dict[SlotKey, PairSlot] = field(default_factory=dict, init=False, repr=False)
    _events: dict[PairType, EventHistograms] = field(default_factory=dict, init=False, repr=False)

    def register_event(self, pair_type: PairType) -> None:
        """Book event counters for one pair type (idempotent)."""
        if pair_type not in self._events:
            self._events[pair_type] = EventHistograms.book()

    def register_pair(self, pair_type: PairType, cut1_name: str, cut2_name: str) -> None:
        """Book the same/mixed histograms of one slot (idempotent)."""
        if self.has_slot(pair_type, cut1_name, cut2_name):
            return
        self._slots[(pair_type, cut1_name, cut2_name)] = PairSlot(
            same=self.binning.make_hist(), mix=self.binning.make_hist()
        )
        logger.debug("registered slot %s/%s_%s", pair_type.name, cut1_name, cut2_name)

    def slot_keys(self) -> tuple[SlotKey, ...]:
        """Registered slots in registration order."""
        return tuple(self._slots)

    def has_slot(self, pair_type: PairType, cut1_name: str, cut2_name: str) -> bool:
        return (pair_type, cut1_name, cut2_name) in self._slots

    def fill(
        self,
        pair_type: PairType,
        cut1_name: str,
        cut2_name: str,
        kind: PairKind,
        observables: CorrelationObservables,
    ) -> None:
        """Add one pair to the same-event or mixed-event histogram of a slot."""
        key = (pair_type, cut1_name, cut2_name)
        try:
            slot = self._slots[key]
        except KeyError as exc:
            raise KeyError(
                f"No histogram slot registered for {pair_type.name}/{cut1_name}_{cut2_name}."
            ) from exc
        values = observables.as_tuple()
        slot.for_kind(kind).fill(*values)
        if self.record_fills:
            self.fill_log.append(FillRecord(pair_type, cut1_name, cut2_name, kind, values))

    def count_event(self, pair_type: PairType, label: str) -> None:
        """Increment one event-counter category."""
        self._event_histograms(pair_type).counter.fill(label)

    def fill_zvtx(self, pair_type: PairType, pos_z: float, after_cut: bool) -> None:
        """Record an event z-vertex before or after the vertex window."""
        histograms = self._event_histograms(pair_type)
        target = histograms.zvtx_after if after_cut else histograms.zvtx_before
        target.fill(pos_z)

    def pair_histogram(
        self, pair_type: PairType, cut1_name: str, cut2_name: str, kind: PairKind
    ) -> hist.Hist:
        """Return the histogram behind one slot and bucket."""
        return self._slots[(pair_type, cut1_name, cut2_name)].for_kind(kind)

    def n_pairs(self, pair_type: PairType, cut1_name: str, cut2_name: str, kind: PairKind) -> float:
        """Total number of pairs filled into a slot, flow bins included."""
        return float(self.pair_histogram(pair_type, cut1_name, cut2_name, kind).sum(flow=True))

    def event_pair_types(self) -> tuple[PairType, ...]:
        """Pair types with booked event histograms, in registration order."""
        return tuple(self._events)

    def event_histograms(self, pair_type: PairType) -> EventHistograms:
        return self._event_histograms(pair_type)

    def event_counts(self, pair_type: PairType) -> dict[str, float]:
        """Event counter content as `{label: count}`."""
        counter = self._event_histograms(pair_type).counter
        return {label: float(value) for label, value in zip(EVENT_COUNTER_LABELS, counter.values(), strict=True)}

    def merge(self, other: "HistogramSink") -> None:
        """Add the content of a sink with the same registered slots."""
        if set(other._slots) != set(self._slots) or set(other._events) != set(self._events):
            raise ValueError("Cannot merge histogram sinks with different registered slots.")
        for key, slot in self._slots.items():
            theirs = other._slots[key]
            slot.same += theirs.same
            slot.mix += theirs.mix
        for pair_type, histograms in self._events.items():
            theirs_ev = other._events[pair_type]
            histograms.counter += theirs_ev.counter
            histograms.zvtx_before += theirs_ev.zvtx_before
            histograms.zvtx_after += theirs_ev.zvtx_after
        if self.record_fills:
            self.fill_log.extend(other.fill_log)

    def _event_histograms(self, pair_type: PairType) -> EventHistograms:
        try:
            return self._events[pair_type]
        except KeyError as exc:
            raise KeyError(f"No event histograms registered for {pair_type.name}.") from exc
