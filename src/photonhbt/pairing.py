"""Same-event and mixed-event photon pairing engines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations, product
from typing import Iterable, Iterator, Sequence

from .cuts import PhotonCut
from .histograms import HistogramSink
from .mixing import MixingBinning, MixingPool
from .models import CandidateTable, Event, PairKind, PairType, PhotonCandidate
from .physics import pair_observables
from .selection import is_selected_pair

logger = logging.getLogger(__name__)

DEFAULT_MAX_ABS_ZVTX = 10.0


@dataclass(frozen=True)
class PairingStats:
    """Summary of one pairing pass."""

    n_events: int
    n_event_pairs: int
    n_pairs: int


def passes_event_selection(event: Event, max_abs_zvtx: float = DEFAULT_MAX_ABS_ZVTX) -> bool:
    """Quality gates shared by same-event and mixed-event pairing."""
    return event.sel8 and event.num_contrib >= 1 and abs(event.pos_z) < max_abs_zvtx


def has_enough_photons(pair_type: PairType, event: Event) -> bool:
    """Candidate multiplicity needed for an event to enter the mixing pool."""
    first, second = pair_type.subsystems
    if pair_type.is_same_subsystem:
        return event.n_photons(first) >= 2
    return event.n_photons(first) >= 1 and event.n_photons(second) >= 1


def _check_tables(pair_type: PairType, table1: CandidateTable, table2: CandidateTable) -> None:
    first, second = pair_type.subsystems
    if table1.subsystem is not first or table2.subsystem is not second:
        raise ValueError(
            f"{pair_type.name} pairing needs {first.value}/{second.value} candidates, "
            f"got {table1.subsystem.value}/{table2.subsystem.value}."
        )


def _check_cuts(pair_type: PairType, cuts1: Sequence[PhotonCut], cuts2: Sequence[PhotonCut]) -> None:
    first, second = pair_type.subsystems
    for cuts, subsystem in ((cuts1, first), (cuts2, second)):
        for cut in cuts:
            if cut.subsystem is not subsystem:
                raise ValueError(
                    f"Cut '{cut.name}' ({cut.subsystem.value}) cannot be used for "
                    f"{subsystem.value} photons in {pair_type.name} pairing."
                )


@dataclass
class SameEventPairing:
    """Pair photons within each accepted event and fill the same-event bucket."""

    sink: HistogramSink
    max_abs_zvtx: float = DEFAULT_MAX_ABS_ZVTX

    def select_events(self, pair_type: PairType, events: Iterable[Event]) -> Iterator[Event]:
        """Apply readout and quality gates in order, filling event counters."""
        for event in events:
            if pair_type.requires_phos_readout and not event.is_phos_cpv_readout:
                continue
            self.sink.fill_zvtx(pair_type, event.pos_z, after_cut=False)
            self.sink.count_event(pair_type, "all")
            if not event.sel8:
                continue
            self.sink.count_event(pair_type, "sel8")
            if event.num_contrib < 1:
                continue
            self.sink.count_event(pair_type, "numContrib")
            if not abs(event.pos_z) < self.max_abs_zvtx:
                logger.debug("collision %d rejected by z-vertex %.2f", event.collision_id, event.pos_z)
                continue
            self.sink.fill_zvtx(pair_type, event.pos_z, after_cut=True)
            self.sink.count_event(pair_type, "zvtx")
            yield event

    def process(
        self,
        pair_type: PairType,
        events: Sequence[Event],
        table1: CandidateTable,
        table2: CandidateTable,
        cuts1: Sequence[PhotonCut],
        cuts2: Sequence[PhotonCut],
    ) -> PairingStats:
        """Run same-event pairing for one pair type over all events."""
        _check_tables(pair_type, table1, table2)
        _check_cuts(pair_type, cuts1, cuts2)
        n_events = 0
        n_pairs = 0
        for event in self.select_events(pair_type, events):
            n_events += 1
            photons1 = table1.slice_by(event.collision_id)
            photons2 = table2.slice_by(event.collision_id)
            for cut1, cut2, g1, g2 in iter_same_event_pairs(pair_type, photons1, photons2, cuts1, cuts2):
                if not is_selected_pair(pair_type, g1, g2, cut1, cut2):
                    continue
                self.sink.fill(pair_type, cut1.name, cut2.name, PairKind.SAME, pair_observables(g1, g2))
                n_pairs += 1
        logger.info("%s same-event: %d events, %d pairs", pair_type.name, n_events, n_pairs)
        return PairingStats(n_events=n_events, n_event_pairs=n_events, n_pairs=n_pairs)


def iter_same_event_pairs(
    pair_type: PairType,
    photons1: Sequence[PhotonCandidate],
    photons2: Sequence[PhotonCandidate],
    cuts1: Sequence[PhotonCut],
    cuts2: Sequence[PhotonCut],
) -> Iterator[tuple[PhotonCut, PhotonCut, PhotonCandidate, PhotonCandidate]]:
    """Yield `(cut1, cut2, g1, g2)` candidates of one event before selection.

    Same-subsystem pairs use identical cuts and the strict upper triangle of
    the photon list; cross-subsystem pairs use the full cut matrix and the full
    photon cross product.
    """
    if pair_type.is_same_subsystem:
        for cut in cuts1:
            for g1, g2 in combinations(photons1, 2):
                yield cut, cut, g1, g2
    else:
        for cut1, cut2 in product(cuts1, cuts2):
            for g1, g2 in product(photons1, photons2):
                yield cut1, cut2, g1, g2


@dataclass
class MixedEventPairing:
    """Pair photons across pooled events and fill the mixed-event bucket.

    `ndepth` caps the number of partner events paired with one anchor event.
    """

    sink: HistogramSink
    binning: MixingBinning
    ndepth: int = 10
    max_neighbours: int | None = 1000
    max_abs_zvtx: float = DEFAULT_MAX_ABS_ZVTX

    def __post_init__(self) -> None:
        if self.ndepth < 0:
            raise ValueError(f"Mixing depth must be non-negative, got {self.ndepth}.")
        if self.max_neighbours is not None and self.max_neighbours < 0:
            raise ValueError(f"max_neighbours must be non-negative, got {self.max_neighbours}.")

    def select_events(self, pair_type: PairType, events: Iterable[Event]) -> list[Event]:
        """Events usable for mixing: quality gates plus photon multiplicity."""
        return [
            event
            for event in events
            if passes_event_selection(event, self.max_abs_zvtx) and has_enough_photons(pair_type, event)
        ]

    def iter_event_pairs(self, pair_type: PairType, events: Iterable[Event]) -> Iterator[tuple[Event, Event]]:
        """Yield mixable event pairs, at most `ndepth` partners per anchor."""
        pool = MixingPool(self.binning)
        pool.extend(self.select_events(pair_type, events))
        logger.debug("%s mixing pool holds %d events", pair_type.name, len(pool))
        anchor_id: int | None = None
        nev = 0
        for event1, event2 in pool.iter_event_pairs(self.max_neighbours):
            if anchor_id != event1.collision_id:
                anchor_id = event1.collision_id
                nev = 0
            if nev >= self.ndepth:
                continue
            yield event1, event2
            nev += 1

    def process(
        self,
        pair_type: PairType,
        events: Sequence[Event],
        table1: CandidateTable,
        table2: CandidateTable,
        cuts1: Sequence[PhotonCut],
        cuts2: Sequence[PhotonCut],
    ) -> PairingStats:
        """Run mixed-event pairing for one pair type."""
        _check_tables(pair_type, table1, table2)
        _check_cuts(pair_type, cuts1, cuts2)
        anchors: set[int] = set()
        n_event_pairs = 0
        n_pairs = 0
        for event1, event2 in self.iter_event_pairs(pair_type, events):
            anchors.add(event1.collision_id)
            n_event_pairs += 1
            photons1 = table1.slice_by(event1.collision_id)
            photons2 = table2.slice_by(event2.collision_id)
            for cut1, cut2 in product(cuts1, cuts2):
                if pair_type.is_same_subsystem and cut1.name != cut2.name:
                    continue
                for g1, g2 in product(photons1, photons2):
                    if not is_selected_pair(pair_type, g1, g2, cut1, cut2):
                        continue
                    self.sink.fill(pair_type, cut1.name, cut2.name, PairKind.MIXED, pair_observables(g1, g2))
                    n_pairs += 1
        logger.info(
            "%s mixed-event: %d event pairs from %d anchors, %d pairs",
            pair_type.name,
            n_event_pairs,
            len(anchors),
            n_pairs,
        )
        return PairingStats(n_events=len(anchors), n_event_pairs=n_event_pairs, n_pairs=n_pairs)
