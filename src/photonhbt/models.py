"""Core data models used by the photon HBT pairing framework.

This module defines:
- immutable event and photon objects (`Event`, `PhotonCandidate`, `V0Leg`)
- the closed variant sets (`Subsystem`, `PairType`, `PairKind`)
- a simple massless-friendly `LorentzVector`
- per-event candidate grouping (`CandidateTable`)
- pair outputs (`CorrelationObservables`)
- run options (`HBTOptions`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence


class Subsystem(Enum):
    """Photon-reconstruction method."""

    PCM = "PCM"
    PHOS = "PHOS"
    EMC = "EMC"


class PairType(Enum):
    """Subsystem combination of a photon pair."""

    PCMPCM = 0
    PHOSPHOS = 1
    EMCEMC = 2
    PCMPHOS = 3
    PCMEMC = 4
    PHOSEMC = 5

    @property
    def subsystems(self) -> tuple[Subsystem, Subsystem]:
        """Subsystems of the first and second photon."""
        return _PAIR_SUBSYSTEMS[self]

    @property
    def is_same_subsystem(self) -> bool:
        """True when both photons come from the same subsystem."""
        first, second = self.subsystems
        return first is second

    @property
    def requires_phos_readout(self) -> bool:
        """True when the event must carry the PHOS/CPV readout flag."""
        return Subsystem.PHOS in self.subsystems


_PAIR_SUBSYSTEMS: dict[PairType, tuple[Subsystem, Subsystem]] = {
    PairType.PCMPCM: (Subsystem.PCM, Subsystem.PCM),
    PairType.PHOSPHOS: (Subsystem.PHOS, Subsystem.PHOS),
    PairType.EMCEMC: (Subsystem.EMC, Subsystem.EMC),
    PairType.PCMPHOS: (Subsystem.PCM, Subsystem.PHOS),
    PairType.PCMEMC: (Subsystem.PCM, Subsystem.EMC),
    PairType.PHOSEMC: (Subsystem.PHOS, Subsystem.EMC),
}


class PairKind(Enum):
    """Histogram bucket a pair is written to."""

    SAME = "same"
    MIXED = "mix"


@dataclass(frozen=True)
class Event:
    """One reconstructed collision with the quantities used for selection and mixing."""

    collision_id: int
    pos_z: float
    num_contrib: int
    mult_ntracks_pv: float
    ngpcm: int = 0
    ngphos: int = 0
    ngemc: int = 0
    sel8: bool = True
    is_phos_cpv_readout: bool = False

    def n_photons(self, subsystem: Subsystem) -> int:
        """Number of photon candidates of one subsystem in this event."""
        if subsystem is Subsystem.PCM:
            return self.ngpcm
        if subsystem is Subsystem.PHOS:
            return self.ngphos
        return self.ngemc


@dataclass(frozen=True)
class V0Leg:
    """Electron/positron track of a conversion photon."""

    pt: float
    eta: float
    tpc_ncls_found: int = 0
    tpc_chi2_ncl: float = 0.0
    tpc_nsigma_el: float = 0.0
    tpc_nsigma_pi: float = 0.0
    dca_xy: float = 0.0
    its_ncls: int = 0


@dataclass(frozen=True)
class PhotonCandidate:
    """Single photon candidate with kinematics and subsystem-specific extras.

    Conversion photons (`PCM`) carry the V0 topology and both legs; calorimeter
    photons (`PHOS`, `EMC`) carry cluster shape fields. Only the selection cuts
    read the auxiliary fields.
    """

    subsystem: Subsystem
    pt: float
    eta: float
    phi: float
    collision_id: int
    candidate_id: int = 0
    # conversion photon
    v0_radius: float = 0.0
    cospa: float = 1.0
    psipair: float = 0.0
    chi2_kf: float = 0.0
    alpha: float = 0.0
    qt: float = 0.0
    legs: tuple[V0Leg, ...] = ()
    # calorimeter cluster
    energy: float = 0.0
    ncells: int = 0
    m02: float = 0.0
    time: float = 0.0
    track_match_distance: float = 1e9


@dataclass(frozen=True)
class LorentzVector:
    """Simple 4-vector with convenience properties and arithmetic."""

    px: float
    py: float
    pz: float
    e: float

    @classmethod
    def from_pt_eta_phi_m(cls, pt: float, eta: float, phi: float, mass: float = 0.0) -> "LorentzVector":
        """Build a 4-vector from collider coordinates."""
        px = pt * math.cos(phi)
        py = pt * math.sin(phi)
        pz = pt * math.sinh(eta)
        energy = math.sqrt(px * px + py * py + pz * pz + mass * mass)
        return cls(px, py, pz, energy)

    def __add__(self, other: "LorentzVector") -> "LorentzVector":
        """Component-wise 4-vector addition."""
        return LorentzVector(
            self.px + other.px,
            self.py + other.py,
            self.pz + other.pz,
            self.e + other.e,
        )

    def __sub__(self, other: "LorentzVector") -> "LorentzVector":
        """Component-wise 4-vector difference."""
        return LorentzVector(
            self.px - other.px,
            self.py - other.py,
            self.pz - other.pz,
            self.e - other.e,
        )

    def scale(self, factor: float) -> "LorentzVector":
        """Multiply all components by a scalar."""
        return LorentzVector(self.px * factor, self.py * factor, self.pz * factor, self.e * factor)

    @property
    def vect(self) -> tuple[float, float, float]:
        """Spatial part."""
        return self.px, self.py, self.pz

    @property
    def p2(self) -> float:
        """Squared 3-momentum magnitude."""
        return self.px * self.px + self.py * self.py + self.pz * self.pz

    @property
    def p(self) -> float:
        """3-momentum magnitude."""
        return math.sqrt(self.p2)

    @property
    def pt(self) -> float:
        """Transverse momentum."""
        return math.sqrt(self.px * self.px + self.py * self.py)

    @property
    def mass2(self) -> float:
        """Invariant mass squared."""
        return self.e * self.e - self.p2


@dataclass(frozen=True)
class CorrelationObservables:
    """Relative-momentum variables of one photon pair."""

    qinv: float
    qlong: float
    qout: float
    qside: float
    kt: float

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        """Values in histogram axis order `(qinv, qlong, qout, qside, kt)`."""
        return self.qinv, self.qlong, self.qout, self.qside, self.kt


class CandidateTable:
    """Photon candidates of one subsystem, sliceable by owning collision id."""

    def __init__(self, subsystem: Subsystem, candidates: Iterable[PhotonCandidate] = ()) -> None:
        self.subsystem = subsystem
        self._candidates: tuple[PhotonCandidate, ...] = tuple(candidates)
        groups: dict[int, list[PhotonCandidate]] = {}
        for candidate in self._candidates:
            if candidate.subsystem is not subsystem:
                raise ValueError(
                    f"Candidate {candidate.candidate_id} has subsystem {candidate.subsystem.value}, "
                    f"expected {subsystem.value}."
                )
            groups.setdefault(candidate.collision_id, []).append(candidate)
        self._by_collision = {cid: tuple(group) for cid, group in groups.items()}

    def slice_by(self, collision_id: int) -> tuple[PhotonCandidate, ...]:
        """Return candidates of one collision in input order (empty if none)."""
        return self._by_collision.get(collision_id, ())

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self) -> Iterator[PhotonCandidate]:
        return iter(self._candidates)


DEFAULT_VERTEX_BIN_EDGES: tuple[float, ...] = (-10.0, -8.0, -6.0, -4.0, -2.0, 0.0, 2.0, 4.0, 6.0, 8.0, 10.0)
DEFAULT_MULTIPLICITY_BIN_EDGES: tuple[float, ...] = (0.0, 10.0, 20.0, 40.0, 60.0, 80.0, 100.0, 200.0, 1e10)


@dataclass(frozen=True)
class HBTOptions:
    """Run configuration for the photon HBT task."""

    cfg_pcm_cuts: str = "analysis,qc,nocut"
    cfg_phos_cuts: str = "test02,test03"
    cfg_emc_cuts: str = ""
    ndepth: int = 10
    vertex_bin_edges: Sequence[float] = DEFAULT_VERTEX_BIN_EDGES
    multiplicity_bin_edges: Sequence[float] = DEFAULT_MULTIPLICITY_BIN_EDGES
    ignore_overflows: bool = False
    max_neighbours: int = 1000
    max_abs_zvtx: float = 10.0
    process_pcm_pcm: bool = False
    process_phos_phos: bool = False
    process_pcm_phos: bool = False

    def enabled_pair_types(self) -> tuple[PairType, ...]:
        """Pair types switched on, in processing order."""
        enabled: list[PairType] = []
        if self.process_pcm_pcm:
            enabled.append(PairType.PCMPCM)
        if self.process_phos_phos:
            enabled.append(PairType.PHOSPHOS)
        if self.process_pcm_phos:
            enabled.append(PairType.PCMPHOS)
        return tuple(enabled)
