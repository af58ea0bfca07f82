"""Photon HBT analysis task: wires cuts, histograms and pairing engines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from .cuts import CutRegistry, PhotonCut
from .histograms import HistogramSink, PairHistogramBinning
from .mixing import MixingBinning
from .models import CandidateTable, Event, HBTOptions, PairType, Subsystem
from .pairing import MixedEventPairing, PairingStats, SameEventPairing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PairTypeResult:
    """Pairing statistics of one enabled pair type."""

    pair_type: PairType
    same: PairingStats
    mixed: PairingStats


class PhotonHBT:
    """Configure once, then run same-event and mixed-event pairing per pair type.

    With none of the process switches enabled the task runs in dummy mode:
    nothing is registered and `run` returns without touching any event.
    """

    def __init__(
        self,
        options: HBTOptions | None = None,
        sink: HistogramSink | None = None,
        binning: PairHistogramBinning | None = None,
    ) -> None:
        self.options = options or HBTOptions()
        self.pair_types = self.options.enabled_pair_types()
        # Unknown cut names abort here, before any event is read.
        self.cuts = CutRegistry.from_names(
            pcm=self.options.cfg_pcm_cuts,
            phos=self.options.cfg_phos_cuts,
            emc=self.options.cfg_emc_cuts,
        )
        if sink is None:
            sink = HistogramSink(binning=binning or PairHistogramBinning())
        self.sink = sink
        self.same_event = SameEventPairing(sink=self.sink, max_abs_zvtx=self.options.max_abs_zvtx)
        self.mixed_event = MixedEventPairing(
            sink=self.sink,
            binning=MixingBinning(
                vertex_edges=self.options.vertex_bin_edges,
                multiplicity_edges=self.options.multiplicity_bin_edges,
                ignore_overflows=self.options.ignore_overflows,
            ),
            ndepth=self.options.ndepth,
            max_neighbours=self.options.max_neighbours,
            max_abs_zvtx=self.options.max_abs_zvtx,
        )
        self._register_histograms()

    @property
    def is_dummy(self) -> bool:
        """True when no pair type is enabled."""
        return not self.pair_types

    def cuts_for_pair(self, pair_type: PairType) -> tuple[tuple[PhotonCut, ...], tuple[PhotonCut, ...]]:
        """Cut lists applied to the first and second photon of a pair type."""
        first, second = pair_type.subsystems
        return self.cuts.cuts_for(first), self.cuts.cuts_for(second)

    def _register_histograms(self) -> None:
        for pair_type in self.pair_types:
            logger.info("Enabled pairs = %s", pair_type.name)
            self.sink.register_event(pair_type)
            cuts1, cuts2 = self.cuts_for_pair(pair_type)
            for cut1 in cuts1:
                for cut2 in cuts2:
                    if pair_type.is_same_subsystem and cut1.name != cut2.name:
                        continue
                    self.sink.register_pair(pair_type, cut1.name, cut2.name)
        if self.is_dummy:
            logger.info("No pair type enabled, running in dummy mode")

    def run(
        self,
        events: Sequence[Event],
        tables: Mapping[Subsystem, CandidateTable],
    ) -> list[PairTypeResult]:
        """Process all enabled pair types over one batch of events."""
        results: list[PairTypeResult] = []
        for pair_type in self.pair_types:
            first, second = pair_type.subsystems
            table1 = tables.get(first, CandidateTable(first))
            table2 = tables.get(second, CandidateTable(second))
            cuts1, cuts2 = self.cuts_for_pair(pair_type)
            same = self.same_event.process(pair_type, events, table1, table2, cuts1, cuts2)
            mixed = self.mixed_event.process(pair_type, events, table1, table2, cuts1, cuts2)
            results.append(PairTypeResult(pair_type=pair_type, same=same, mixed=mixed))
        return results
