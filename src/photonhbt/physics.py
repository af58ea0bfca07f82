"""Physics/math helpers for photon-pair correlation observables."""

from __future__ import annotations

import math

from .models import CorrelationObservables, LorentzVector, PhotonCandidate

BEAM_AXIS = (0.0, 0.0, 1.0)
_ZERO3 = (0.0, 0.0, 0.0)
# |k| below this fraction of |p1| + |p2| counts as a vanishing pair momentum.
REL_ZERO_K = 1e-12


def photon_to_lorentz(photon: PhotonCandidate) -> LorentzVector:
    """Convert a photon candidate into a massless Lorentz 4-vector."""
    return LorentzVector.from_pt_eta_phi_m(photon.pt, photon.eta, photon.phi, 0.0)


def pair_observables(g1: PhotonCandidate, g2: PhotonCandidate) -> CorrelationObservables:
    """Compute `(qinv, qlong, qout, qside, kt)` for one photon pair.

    The relative momentum `q = p1 - p2` is projected in the
    longitudinally co-moving frame convention: `out` along the 3-momentum of
    the pair average `k = (p1 + p2) / 2`, `long` along the beam axis and
    `side = out x long`.

    For a pair whose average 3-momentum vanishes relative to the photon
    momenta, `out` and `side` are the zero vector, so `qout = qside = 0`.
    """
    return lorentz_pair_observables(photon_to_lorentz(g1), photon_to_lorentz(g2))


def lorentz_pair_observables(v1: LorentzVector, v2: LorentzVector) -> CorrelationObservables:
    """Same as `pair_observables` but for already-built 4-vectors."""
    q12 = v1 - v2
    k12 = (v1 + v2).scale(0.5)
    # q12 is spacelike for massless inputs; clamp rounding noise near zero.
    qinv = math.sqrt(max(-q12.mass2, 0.0))
    kt = k12.pt

    q_3d = q12.vect
    k_3d = k12.vect
    if norm3(k_3d) <= REL_ZERO_K * (v1.p + v2.p):
        uv_out = _ZERO3
    else:
        uv_out = unit3(k_3d)
    uv_long = BEAM_AXIS
    uv_side = cross3(uv_out, uv_long)
    return CorrelationObservables(
        qinv=qinv,
        qlong=dot3(q_3d, uv_long),
        qout=dot3(q_3d, uv_out),
        qside=dot3(q_3d, uv_side),
        kt=kt,
    )


def unit3(a: tuple[float, float, float]) -> tuple[float, float, float]:
    """Unit vector along `a`; the zero vector maps to itself."""
    norm = norm3(a)
    if norm == 0.0:
        return _ZERO3
    return a[0] / norm, a[1] / norm, a[2] / norm


def dot3(a: tuple[float, float, float], b: tuple[float, float, float]) -> float:
    """3D dot product."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross3(a: tuple[float, float, float], b: tuple[float, float, float]) -> tuple[float, float, float]:
    """3D cross product."""
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def norm3(a: tuple[float, float, float]) -> float:
    """Euclidean norm of a 3D vector."""
    return math.sqrt(dot3(a, a))
