"""Unit tests for photon-pair correlation observables."""

from __future__ import annotations

import math
import unittest

from photonhbt import LorentzVector, PhotonCandidate, Subsystem, pair_observables
from photonhbt.physics import cross3, lorentz_pair_observables, unit3


def _photon(pt: float, eta: float, phi: float) -> PhotonCandidate:
    """Build a bare PHOS photon with given kinematics."""
    return PhotonCandidate(Subsystem.PHOS, pt=pt, eta=eta, phi=phi, collision_id=0)


class TestPairObservables(unittest.TestCase):
    """Validate qinv, Bertsch-Pratt projections and kt."""

    def test_back_to_back_pair_in_transverse_plane(self) -> None:
        """Opposite transverse momenta cancel in kt; qinv is twice the single pt."""
        obs = pair_observables(_photon(1.0, 0.0, 0.0), _photon(1.0, 0.0, math.pi))
        self.assertAlmostEqual(obs.kt, 0.0, places=12)
        self.assertAlmostEqual(obs.qinv, 2.0, places=12)
        self.assertAlmostEqual(obs.qlong, 0.0, places=12)
        self.assertEqual(obs.qout, 0.0)
        self.assertEqual(obs.qside, 0.0)

    def test_back_to_back_pairs_at_any_momentum_scale(self) -> None:
        """Rounding noise in a vanishing k must not pick an out axis, whatever the pt."""
        for pt in (1.0, 3.0, 10.0, 100.0):
            for eta, phi in ((0.0, 0.0), (0.4, 0.7), (-0.8, 2.5)):
                with self.subTest(pt=pt, eta=eta, phi=phi):
                    obs = pair_observables(_photon(pt, eta, phi), _photon(pt, -eta, phi + math.pi))
                    self.assertEqual((obs.qout, obs.qside), (0.0, 0.0))
                    self.assertAlmostEqual(obs.kt, 0.0, delta=1e-12 * pt)
                    self.assertAlmostEqual(obs.qinv, 2.0 * pt * math.cosh(eta), delta=1e-9 * pt)

    def test_small_but_physical_pair_momentum_keeps_out_axis(self) -> None:
        """A genuinely small k still defines the out direction."""
        v1 = LorentzVector(5.0 + 1e-6, 0.0, 0.0, 5.0 + 1e-6)
        v2 = LorentzVector(-5.0, 0.0, 0.0, 5.0)
        obs = lorentz_pair_observables(v1, v2)
        self.assertAlmostEqual(obs.qout, 10.0 + 1e-6, places=9)
        self.assertAlmostEqual(obs.qside, 0.0, places=12)

    def test_zero_pair_momentum_uses_zero_out_and_side_axes(self) -> None:
        """Exactly vanishing average momentum gives qout = qside = 0 without errors."""
        v1 = LorentzVector(0.0, 0.0, 1.5, 1.5)
        v2 = LorentzVector(0.0, 0.0, -1.5, 1.5)
        obs = lorentz_pair_observables(v1, v2)
        self.assertEqual(obs.qout, 0.0)
        self.assertEqual(obs.qside, 0.0)
        self.assertAlmostEqual(obs.qlong, 3.0, places=12)
        self.assertAlmostEqual(obs.qinv, 3.0, places=12)
        self.assertEqual(obs.kt, 0.0)

    def test_identical_photons_have_zero_relative_momentum(self) -> None:
        """A photon paired with a copy of itself has q = 0 everywhere."""
        g = _photon(0.7, 0.3, 1.1)
        obs = pair_observables(g, g)
        self.assertEqual(obs.qinv, 0.0)
        self.assertAlmostEqual(obs.qout, 0.0, places=12)
        self.assertAlmostEqual(obs.qside, 0.0, places=12)
        self.assertAlmostEqual(obs.qlong, 0.0, places=12)
        self.assertAlmostEqual(obs.kt, 0.7, places=12)

    def test_qinv_is_non_negative_for_massless_pairs(self) -> None:
        """qinv is the positive root of the spacelike invariant."""
        kinematics = [
            (0.1, -0.8, 0.0),
            (0.35, 0.2, 2.0),
            (1.2, 0.85, -2.9),
            (0.5, 0.0, 3.1),
            (0.5001, 0.0001, 3.1001),
        ]
        for a in kinematics:
            for b in kinematics:
                obs = pair_observables(_photon(*a), _photon(*b))
                self.assertGreaterEqual(obs.qinv, 0.0)
                self.assertTrue(math.isfinite(obs.qout))
                self.assertTrue(math.isfinite(obs.qside))

    def test_qinv_matches_opening_angle_formula(self) -> None:
        """For massless photons qinv^2 = 2 E1 E2 (1 - cos theta12)."""
        g1 = _photon(0.4, 0.1, 0.2)
        g2 = _photon(0.6, -0.3, 0.9)
        v1 = LorentzVector.from_pt_eta_phi_m(g1.pt, g1.eta, g1.phi)
        v2 = LorentzVector.from_pt_eta_phi_m(g2.pt, g2.eta, g2.phi)
        cos12 = (v1.px * v2.px + v1.py * v2.py + v1.pz * v2.pz) / (v1.p * v2.p)
        expected = math.sqrt(2.0 * v1.e * v2.e * (1.0 - cos12))
        self.assertAlmostEqual(pair_observables(g1, g2).qinv, expected, places=12)

    def test_out_side_long_decomposition_of_transverse_pair(self) -> None:
        """At midrapidity with k along x, q splits into out=x, side=-y, long=z components."""
        v1 = LorentzVector(1.0, 0.1, 0.05, math.sqrt(1.0 + 0.01 + 0.0025))
        v2 = LorentzVector(1.0, -0.1, -0.05, math.sqrt(1.0 + 0.01 + 0.0025))
        obs = lorentz_pair_observables(v1, v2)
        self.assertAlmostEqual(obs.qout, 0.0, places=12)
        # side = x_hat cross z_hat = -y_hat
        self.assertAlmostEqual(obs.qside, -0.2, places=12)
        self.assertAlmostEqual(obs.qlong, 0.1, places=12)
        self.assertAlmostEqual(obs.kt, 1.0, places=12)

    def test_observables_tuple_order(self) -> None:
        """Histogram fill order is (qinv, qlong, qout, qside, kt)."""
        obs = pair_observables(_photon(0.4, 0.1, 0.2), _photon(0.6, -0.3, 0.9))
        self.assertEqual(obs.as_tuple(), (obs.qinv, obs.qlong, obs.qout, obs.qside, obs.kt))

    def test_vector_helpers(self) -> None:
        """unit3 normalizes and maps the zero vector to itself; cross3 is right-handed."""
        self.assertEqual(unit3((0.0, 0.0, 0.0)), (0.0, 0.0, 0.0))
        ux, uy, uz = unit3((3.0, 0.0, 4.0))
        self.assertAlmostEqual(ux, 0.6, places=12)
        self.assertAlmostEqual(uy, 0.0, places=12)
        self.assertAlmostEqual(uz, 0.8, places=12)
        self.assertEqual(cross3((1.0, 0.0, 0.0), (0.0, 1.0, 0.0)), (0.0, 0.0, 1.0))


if __name__ == "__main__":
    unittest.main()
