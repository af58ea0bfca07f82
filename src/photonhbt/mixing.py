"""Event pooling for mixed-event pairing.

Events are grouped by `(z-vertex bin, multiplicity bin)`. Each bin keeps the
events it received in arrival order; nothing is ever evicted. Candidate event
pairs are generated per anchor event from the later events of the same bin.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from .models import Event

BinKey = tuple[int, int]


def _validate_edges(edges: Sequence[float], label: str) -> tuple[float, ...]:
    """Check that bin edges are at least two strictly increasing numbers."""
    values = tuple(float(x) for x in edges)
    if len(values) < 2:
        raise ValueError(f"{label} bin edges need at least two values, got {len(values)}.")
    for low, high in zip(values, values[1:]):
        if not high > low:
            raise ValueError(f"{label} bin edges must be strictly increasing: {list(values)}")
    return values


def _bin_index(edges: tuple[float, ...], value: float) -> int:
    """Index of the bin holding `value`; -1 below the first edge, n above the last."""
    if value < edges[0]:
        return -1
    if value >= edges[-1]:
        return len(edges) - 1
    return bisect_right(edges, value) - 1


@dataclass(frozen=True)
class MixingBinning:
    """Two-dimensional binning in event z-vertex and multiplicity.

    Edges are lower-inclusive. Values beyond the outer edges land in
    open-ended underflow/overflow bins unless `ignore_overflows` is set, in
    which case such events are not pooled at all.
    """

    vertex_edges: Sequence[float]
    multiplicity_edges: Sequence[float]
    ignore_overflows: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertex_edges", _validate_edges(self.vertex_edges, "Vertex"))
        object.__setattr__(
            self, "multiplicity_edges", _validate_edges(self.multiplicity_edges, "Multiplicity")
        )

    def bin_of(self, event: Event) -> BinKey | None:
        """Pool key of an event, or `None` if it falls outside and overflows are ignored."""
        iz = _bin_index(self.vertex_edges, event.pos_z)
        im = _bin_index(self.multiplicity_edges, event.mult_ntracks_pv)
        if self.ignore_overflows:
            if iz < 0 or iz >= len(self.vertex_edges) - 1:
                return None
            if im < 0 or im >= len(self.multiplicity_edges) - 1:
                return None
        return iz, im


@dataclass
class MixingPool:
    """Per-bin ordered backlog of pooled events."""

    binning: MixingBinning
    _bins: dict[BinKey, list[Event]] = field(default_factory=dict, init=False, repr=False)
    _order: list[tuple[BinKey, int]] = field(default_factory=list, init=False, repr=False)

    def add(self, event: Event) -> BinKey | None:
        """Append an event to the backlog of its bin; return the bin key used."""
        key = self.binning.bin_of(event)
        if key is None:
            return None
        backlog = self._bins.setdefault(key, [])
        self._order.append((key, len(backlog)))
        backlog.append(event)
        return key

    def extend(self, events: Iterable[Event]) -> None:
        for event in events:
            self.add(event)

    def __len__(self) -> int:
        return len(self._order)

    def iter_event_pairs(self, max_neighbours: int | None = None) -> Iterator[tuple[Event, Event]]:
        """Yield `(anchor, partner)` pairs of distinct events sharing a bin.

        Anchors follow arrival order. Partners are the later events of the
        anchor's bin, in arrival order, at most `max_neighbours` of them.
        """
        for key, position in self._order:
            backlog = self._bins[key]
            anchor = backlog[position]
            stop = len(backlog) if max_neighbours is None else min(len(backlog), position + 1 + max_neighbours)
            for partner in backlog[position + 1 : stop]:
                if partner.collision_id == anchor.collision_id:
                    continue
                yield anchor, partner
