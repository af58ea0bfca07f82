"""Named photon selection cuts and their registry.

Each cut is an immutable set of optional thresholds with a stable name. The
name selects the cut from configuration and labels the output histograms.
Thresholds left as `None` are not applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .models import PhotonCandidate, Subsystem, V0Leg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class V0PhotonCut:
    """Selection for conversion photons, evaluated on the photon and both legs."""

    name: str
    min_pt: float | None = None
    max_abs_eta: float | None = None
    min_v0_radius: float | None = None
    max_v0_radius: float | None = None
    min_cospa: float | None = None
    max_abs_psipair: float | None = None
    max_chi2_kf: float | None = None
    max_qt: float | None = None
    max_abs_alpha: float | None = None
    require_two_legs: bool = True
    min_leg_pt: float | None = None
    max_leg_abs_eta: float | None = None
    min_tpc_ncls: int | None = None
    max_tpc_chi2_ncl: float | None = None
    max_abs_tpc_nsigma_el: float | None = None
    min_abs_tpc_nsigma_pi: float | None = None
    max_abs_dca_xy: float | None = None

    subsystem = Subsystem.PCM

    def is_selected(self, photon: PhotonCandidate) -> bool:
        """Apply photon-level, topology and leg-level requirements."""
        if self.min_pt is not None and photon.pt < self.min_pt:
            return False
        if self.max_abs_eta is not None and abs(photon.eta) > self.max_abs_eta:
            return False
        if self.min_v0_radius is not None and photon.v0_radius < self.min_v0_radius:
            return False
        if self.max_v0_radius is not None and photon.v0_radius > self.max_v0_radius:
            return False
        if self.min_cospa is not None and photon.cospa < self.min_cospa:
            return False
        if self.max_abs_psipair is not None and abs(photon.psipair) > self.max_abs_psipair:
            return False
        if self.max_chi2_kf is not None and photon.chi2_kf > self.max_chi2_kf:
            return False
        if self.max_abs_alpha is not None and abs(photon.alpha) > self.max_abs_alpha:
            return False
        if self.max_qt is not None and photon.qt > self.max_qt:
            return False
        if self.require_two_legs and len(photon.legs) != 2:
            return False
        return all(self.is_selected_leg(leg) for leg in photon.legs)

    def is_selected_leg(self, leg: V0Leg) -> bool:
        """Track-quality and electron-identification requirements on one leg."""
        if self.min_leg_pt is not None and leg.pt < self.min_leg_pt:
            return False
        if self.max_leg_abs_eta is not None and abs(leg.eta) > self.max_leg_abs_eta:
            return False
        if self.min_tpc_ncls is not None and leg.tpc_ncls_found < self.min_tpc_ncls:
            return False
        if self.max_tpc_chi2_ncl is not None and leg.tpc_chi2_ncl > self.max_tpc_chi2_ncl:
            return False
        if self.max_abs_tpc_nsigma_el is not None and abs(leg.tpc_nsigma_el) > self.max_abs_tpc_nsigma_el:
            return False
        if self.min_abs_tpc_nsigma_pi is not None and abs(leg.tpc_nsigma_pi) < self.min_abs_tpc_nsigma_pi:
            return False
        if self.max_abs_dca_xy is not None and abs(leg.dca_xy) > self.max_abs_dca_xy:
            return False
        return True


@dataclass(frozen=True)
class CaloPhotonCut:
    """Selection for calorimeter clusters (PHOS or EMCal)."""

    name: str
    subsystem: Subsystem
    min_energy: float | None = None
    max_energy: float | None = None
    min_ncells: int | None = None
    min_m02: float | None = None
    max_m02: float | None = None
    max_abs_time: float | None = None
    min_track_match_distance: float | None = None

    def is_selected(self, photon: PhotonCandidate) -> bool:
        """Apply cluster energy, shape, timing and charged-veto requirements."""
        if self.min_energy is not None and photon.energy < self.min_energy:
            return False
        if self.max_energy is not None and photon.energy > self.max_energy:
            return False
        if self.min_ncells is not None and photon.ncells < self.min_ncells:
            return False
        if self.min_m02 is not None and photon.m02 < self.min_m02:
            return False
        if self.max_m02 is not None and photon.m02 > self.max_m02:
            return False
        if self.max_abs_time is not None and abs(photon.time) > self.max_abs_time:
            return False
        if (
            self.min_track_match_distance is not None
            and photon.track_match_distance < self.min_track_match_distance
        ):
            return False
        return True


PhotonCut = V0PhotonCut | CaloPhotonCut

_PCM_CUTS: dict[str, V0PhotonCut] = {
    cut.name: cut
    for cut in (
        V0PhotonCut(name="nocut", require_two_legs=False),
        V0PhotonCut(
            name="qc",
            min_pt=0.02,
            max_abs_eta=0.9,
            min_v0_radius=1.0,
            max_v0_radius=180.0,
            min_cospa=0.99,
            max_chi2_kf=1e10,
            min_leg_pt=0.01,
            max_leg_abs_eta=0.9,
            min_tpc_ncls=10,
            max_tpc_chi2_ncl=4.0,
            max_abs_tpc_nsigma_el=3.0,
        ),
        V0PhotonCut(
            name="analysis",
            min_pt=0.1,
            max_abs_eta=0.9,
            min_v0_radius=1.0,
            max_v0_radius=90.0,
            min_cospa=0.999,
            max_abs_psipair=0.1,
            max_chi2_kf=30.0,
            max_qt=0.05,
            max_abs_alpha=0.95,
            min_leg_pt=0.05,
            max_leg_abs_eta=0.9,
            min_tpc_ncls=40,
            max_tpc_chi2_ncl=4.0,
            max_abs_tpc_nsigma_el=3.0,
            min_abs_tpc_nsigma_pi=2.0,
            max_abs_dca_xy=1e10,
        ),
        V0PhotonCut(
            name="wwire",
            min_pt=0.1,
            max_abs_eta=0.9,
            min_v0_radius=1.0,
            max_v0_radius=90.0,
            min_cospa=0.999,
            min_leg_pt=0.05,
            max_leg_abs_eta=0.9,
            min_tpc_ncls=40,
            max_abs_tpc_nsigma_el=3.0,
        ),
    )
}

_PHOS_CUTS: dict[str, CaloPhotonCut] = {
    cut.name: cut
    for cut in (
        CaloPhotonCut(name="nocut", subsystem=Subsystem.PHOS),
        CaloPhotonCut(
            name="test02",
            subsystem=Subsystem.PHOS,
            min_energy=0.2,
            min_ncells=2,
            min_m02=0.1,
            max_abs_time=100e-9,
        ),
        CaloPhotonCut(
            name="test03",
            subsystem=Subsystem.PHOS,
            min_energy=0.3,
            min_ncells=3,
            min_m02=0.1,
            max_abs_time=50e-9,
            min_track_match_distance=2.0,
        ),
    )
}

_EMC_CUTS: dict[str, CaloPhotonCut] = {
    cut.name: cut
    for cut in (
        CaloPhotonCut(name="nocut", subsystem=Subsystem.EMC),
        CaloPhotonCut(
            name="standard",
            subsystem=Subsystem.EMC,
            min_energy=0.7,
            min_ncells=1,
            min_m02=0.1,
            max_m02=0.7,
            max_abs_time=20e-9,
            min_track_match_distance=0.05,
        ),
    )
}

_LIBRARY: dict[Subsystem, dict[str, PhotonCut]] = {
    Subsystem.PCM: _PCM_CUTS,
    Subsystem.PHOS: _PHOS_CUTS,
    Subsystem.EMC: _EMC_CUTS,
}


def cut_from_name(subsystem: Subsystem, name: str) -> PhotonCut:
    """Resolve a cut name of one subsystem into the prebuilt cut object."""
    try:
        return _LIBRARY[subsystem][name.strip()]
    except KeyError as exc:
        supported = ", ".join(available_cut_names(subsystem))
        raise ValueError(
            f"Unknown {subsystem.value} cut name '{name}'. Supported names: {supported}"
        ) from exc


def pcm_cut_from_name(name: str) -> V0PhotonCut:
    """Return the named conversion-photon cut."""
    return cut_from_name(Subsystem.PCM, name)  # type: ignore[return-value]


def phos_cut_from_name(name: str) -> CaloPhotonCut:
    """Return the named PHOS cluster cut."""
    return cut_from_name(Subsystem.PHOS, name)  # type: ignore[return-value]


def emc_cut_from_name(name: str) -> CaloPhotonCut:
    """Return the named EMCal cluster cut."""
    return cut_from_name(Subsystem.EMC, name)  # type: ignore[return-value]


def available_cut_names(subsystem: Subsystem) -> tuple[str, ...]:
    """Names known to the library for one subsystem."""
    return tuple(sorted(_LIBRARY[subsystem]))


def parse_cut_names(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated cut list, dropping blanks."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


class CutRegistry:
    """Resolved, ordered cut collections per subsystem."""

    def __init__(self, cuts: dict[Subsystem, Sequence[PhotonCut]] | None = None) -> None:
        self._cuts: dict[Subsystem, tuple[PhotonCut, ...]] = {s: () for s in Subsystem}
        for subsystem, subsystem_cuts in (cuts or {}).items():
            for cut in subsystem_cuts:
                if cut.subsystem is not subsystem:
                    raise ValueError(
                        f"Cut '{cut.name}' belongs to {cut.subsystem.value}, not {subsystem.value}."
                    )
            self._cuts[subsystem] = tuple(subsystem_cuts)

    @classmethod
    def from_names(
        cls,
        pcm: str | None = None,
        phos: str | None = None,
        emc: str | None = None,
    ) -> "CutRegistry":
        """Resolve comma-separated cut lists; any unknown name raises `ValueError`."""
        resolved: dict[Subsystem, Sequence[PhotonCut]] = {}
        for subsystem, value in ((Subsystem.PCM, pcm), (Subsystem.PHOS, phos), (Subsystem.EMC, emc)):
            cuts: list[PhotonCut] = []
            for cut_name in parse_cut_names(value):
                logger.info("add cut : %s", cut_name)
                cuts.append(cut_from_name(subsystem, cut_name))
            logger.info("Number of %s cuts = %d", subsystem.value, len(cuts))
            resolved[subsystem] = cuts
        return cls(resolved)

    def cuts_for(self, subsystem: Subsystem) -> tuple[PhotonCut, ...]:
        """Ordered cuts of one subsystem."""
        return self._cuts[subsystem]
