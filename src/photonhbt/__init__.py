"""Public package exports for the photon HBT pairing framework."""

from .cuts import (
    CaloPhotonCut,
    CutRegistry,
    V0PhotonCut,
    cut_from_name,
    emc_cut_from_name,
    parse_cut_names,
    pcm_cut_from_name,
    phos_cut_from_name,
)
from .histograms import HistogramSink, PairHistogramBinning
from .mixing import MixingBinning, MixingPool
from .models import (
    CandidateTable,
    CorrelationObservables,
    Event,
    HBTOptions,
    LorentzVector,
    PairKind,
    PairType,
    PhotonCandidate,
    Subsystem,
    V0Leg,
)
from .pairing import MixedEventPairing, PairingStats, SameEventPairing
from .physics import pair_observables
from .selection import is_selected_pair
from .task import PhotonHBT

__all__ = [
    "PhotonHBT",
    "HBTOptions",
    "Event",
    "PhotonCandidate",
    "V0Leg",
    "Subsystem",
    "PairType",
    "PairKind",
    "CandidateTable",
    "LorentzVector",
    "CorrelationObservables",
    "pair_observables",
    "V0PhotonCut",
    "CaloPhotonCut",
    "CutRegistry",
    "cut_from_name",
    "pcm_cut_from_name",
    "phos_cut_from_name",
    "emc_cut_from_name",
    "parse_cut_names",
    "is_selected_pair",
    "HistogramSink",
    "PairHistogramBinning",
    "MixingBinning",
    "MixingPool",
    "SameEventPairing",
    "MixedEventPairing",
    "PairingStats",
]
