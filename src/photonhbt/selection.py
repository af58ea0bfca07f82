"""Pair-level photon selection.

The pair type fixes which predicate applies to each photon: conversion photons
are judged together with their two legs, calorimeter photons as single
clusters. `cut1` only ever sees `g1` and `cut2` only ever sees `g2`.
"""

from __future__ import annotations

from typing import Callable

from .cuts import CaloPhotonCut, PhotonCut, V0PhotonCut
from .models import PairType, PhotonCandidate, Subsystem

Predicate = Callable[[PhotonCut, PhotonCandidate], bool]


def is_selected_v0_photon(cut: PhotonCut, photon: PhotonCandidate) -> bool:
    """Composite predicate: photon topology plus both V0 legs."""
    if not isinstance(cut, V0PhotonCut):
        raise ValueError(f"Cut '{cut.name}' is not a conversion-photon cut.")
    return cut.is_selected(photon)


def is_selected_phos_cluster(cut: PhotonCut, photon: PhotonCandidate) -> bool:
    """Single PHOS cluster predicate."""
    if not isinstance(cut, CaloPhotonCut) or cut.subsystem is not Subsystem.PHOS:
        raise ValueError(f"Cut '{cut.name}' is not a PHOS cluster cut.")
    return cut.is_selected(photon)


def is_selected_emc_cluster(cut: PhotonCut, photon: PhotonCandidate) -> bool:
    """Single EMCal cluster predicate."""
    if not isinstance(cut, CaloPhotonCut) or cut.subsystem is not Subsystem.EMC:
        raise ValueError(f"Cut '{cut.name}' is not an EMC cluster cut.")
    return cut.is_selected(photon)


_PAIR_PREDICATES: dict[PairType, tuple[Predicate, Predicate]] = {
    PairType.PCMPCM: (is_selected_v0_photon, is_selected_v0_photon),
    PairType.PHOSPHOS: (is_selected_phos_cluster, is_selected_phos_cluster),
    PairType.EMCEMC: (is_selected_emc_cluster, is_selected_emc_cluster),
    PairType.PCMPHOS: (is_selected_v0_photon, is_selected_phos_cluster),
    PairType.PCMEMC: (is_selected_v0_photon, is_selected_emc_cluster),
    PairType.PHOSEMC: (is_selected_phos_cluster, is_selected_emc_cluster),
}


def is_selected_pair(
    pair_type: PairType,
    g1: PhotonCandidate,
    g2: PhotonCandidate,
    cut1: PhotonCut,
    cut2: PhotonCut,
) -> bool:
    """Return True when `g1` passes `cut1` and `g2` passes `cut2`."""
    select1, select2 = _PAIR_PREDICATES[pair_type]
    return select1(cut1, g1) and select2(cut2, g2)
