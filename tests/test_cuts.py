"""Unit tests for the named cut library, registry, and pair selection."""

from __future__ import annotations

import unittest

from photonhbt import (
    CaloPhotonCut,
    CutRegistry,
    PairType,
    PhotonCandidate,
    Subsystem,
    V0Leg,
    V0PhotonCut,
    emc_cut_from_name,
    is_selected_pair,
    parse_cut_names,
    pcm_cut_from_name,
    phos_cut_from_name,
)
from photonhbt.cuts import available_cut_names
from photonhbt.selection import is_selected_emc_cluster, is_selected_phos_cluster


def _leg(pt: float = 0.5, ncls: int = 120) -> V0Leg:
    """Good-quality electron leg."""
    return V0Leg(pt=pt, eta=0.1, tpc_ncls_found=ncls, tpc_chi2_ncl=1.0, tpc_nsigma_el=0.5, tpc_nsigma_pi=4.0)


def _pcm(pt: float = 1.0, legs: tuple[V0Leg, ...] | None = None) -> PhotonCandidate:
    """Conversion photon passing the `analysis` selection by default."""
    return PhotonCandidate(
        Subsystem.PCM,
        pt=pt,
        eta=0.2,
        phi=1.0,
        collision_id=1,
        v0_radius=20.0,
        cospa=0.9999,
        psipair=0.01,
        chi2_kf=2.0,
        alpha=0.1,
        qt=0.01,
        legs=(_leg(), _leg()) if legs is None else legs,
    )


def _phos(energy: float = 1.0) -> PhotonCandidate:
    """PHOS cluster passing both `test02` and `test03` by default."""
    return PhotonCandidate(
        Subsystem.PHOS,
        pt=energy,
        eta=0.0,
        phi=4.5,
        collision_id=1,
        energy=energy,
        ncells=5,
        m02=0.3,
        time=1e-9,
        track_match_distance=10.0,
    )


class TestCutLibrary(unittest.TestCase):
    """Validate named lookup and predicates."""

    def test_parse_cut_names_strips_and_drops_blanks(self) -> None:
        """Comma lists tolerate whitespace and empty entries."""
        self.assertEqual(parse_cut_names(" analysis, qc,,nocut "), ("analysis", "qc", "nocut"))
        self.assertEqual(parse_cut_names(""), ())
        self.assertEqual(parse_cut_names(None), ())

    def test_unknown_cut_name_raises(self) -> None:
        """An unknown name is a configuration error listing supported names."""
        with self.assertRaises(ValueError) as ctx:
            pcm_cut_from_name("doesnotexist")
        self.assertIn("analysis", str(ctx.exception))

    def test_registry_preserves_order_and_fails_fast(self) -> None:
        """Resolution keeps input order; one bad name aborts everything."""
        registry = CutRegistry.from_names(pcm="qc,analysis", phos="test03,test02")
        self.assertEqual([c.name for c in registry.cuts_for(Subsystem.PCM)], ["qc", "analysis"])
        self.assertEqual([c.name for c in registry.cuts_for(Subsystem.PHOS)], ["test03", "test02"])
        self.assertEqual(registry.cuts_for(Subsystem.EMC), ())
        with self.assertRaises(ValueError):
            CutRegistry.from_names(pcm="qc", phos="test02,bogus")

    def test_registry_rejects_cut_of_other_subsystem(self) -> None:
        """A PHOS cut cannot be registered under PCM."""
        with self.assertRaises(ValueError):
            CutRegistry({Subsystem.PCM: [phos_cut_from_name("test02")]})

    def test_v0_cut_checks_legs(self) -> None:
        """A conversion photon with a bad leg fails the composite predicate."""
        cut = pcm_cut_from_name("analysis")
        self.assertTrue(cut.is_selected(_pcm()))
        self.assertFalse(cut.is_selected(_pcm(legs=(_leg(), _leg(ncls=10)))))
        self.assertFalse(cut.is_selected(_pcm(legs=(_leg(),))))
        self.assertTrue(pcm_cut_from_name("nocut").is_selected(_pcm(legs=())))

    def test_available_names_are_listed_in_errors(self) -> None:
        """Library names are listed per subsystem and quoted by failed lookups."""
        self.assertEqual(available_cut_names(Subsystem.PHOS), ("nocut", "test02", "test03"))
        self.assertIn("analysis", available_cut_names(Subsystem.PCM))
        with self.assertRaises(ValueError) as ctx:
            phos_cut_from_name("test99")
        self.assertIn(", ".join(available_cut_names(Subsystem.PHOS)), str(ctx.exception))

    def test_calo_cut_thresholds(self) -> None:
        """Cluster energy threshold separates test02 from test03."""
        self.assertTrue(phos_cut_from_name("test02").is_selected(_phos(0.25)))
        self.assertFalse(phos_cut_from_name("test03").is_selected(_phos(0.25)))


class TestPairSelection(unittest.TestCase):
    """Validate tagged-dispatch pair selection."""

    def test_same_subsystem_pair_requires_both(self) -> None:
        """Logical AND of the two single-photon decisions."""
        cut = pcm_cut_from_name("analysis")
        self.assertTrue(is_selected_pair(PairType.PCMPCM, _pcm(), _pcm(), cut, cut))
        self.assertFalse(is_selected_pair(PairType.PCMPCM, _pcm(), _pcm(pt=0.05), cut, cut))
        self.assertFalse(is_selected_pair(PairType.PCMPCM, _pcm(pt=0.05), _pcm(), cut, cut))

    def test_cross_subsystem_cuts_are_never_swapped(self) -> None:
        """cut1 only judges the PCM photon and cut2 only the PHOS photon."""
        seen: list[tuple[str, int]] = []

        class SpyV0Cut(V0PhotonCut):
            def is_selected(self, photon):  # type: ignore[override]
                seen.append((self.name, photon.candidate_id))
                return True

        class SpyCaloCut(CaloPhotonCut):
            def is_selected(self, photon):  # type: ignore[override]
                seen.append((self.name, photon.candidate_id))
                return True

        g1 = PhotonCandidate(Subsystem.PCM, pt=1.0, eta=0.0, phi=0.0, collision_id=1, candidate_id=11)
        g2 = PhotonCandidate(Subsystem.PHOS, pt=1.0, eta=0.0, phi=3.0, collision_id=1, candidate_id=22)
        ok = is_selected_pair(
            PairType.PCMPHOS,
            g1,
            g2,
            SpyV0Cut(name="c1"),
            SpyCaloCut(name="c2", subsystem=Subsystem.PHOS),
        )
        self.assertTrue(ok)
        self.assertEqual(seen, [("c1", 11), ("c2", 22)])

    def test_cut_of_wrong_subsystem_raises(self) -> None:
        """Passing a PHOS cut for the PCM slot is a programming error."""
        with self.assertRaises(ValueError):
            is_selected_pair(
                PairType.PCMPHOS,
                _pcm(),
                _phos(),
                phos_cut_from_name("test02"),
                phos_cut_from_name("test02"),
            )

    def test_calorimeter_predicates_check_cut_subsystem(self) -> None:
        """PHOS and EMCal cluster cuts are not interchangeable."""
        emc_cut = emc_cut_from_name("nocut")
        phos_cut = phos_cut_from_name("nocut")
        emc_photon = PhotonCandidate(Subsystem.EMC, pt=1.0, eta=0.0, phi=1.0, collision_id=1, energy=1.0)
        self.assertTrue(is_selected_emc_cluster(emc_cut, emc_photon))
        self.assertTrue(is_selected_phos_cluster(phos_cut, _phos()))
        self.assertTrue(is_selected_pair(PairType.PHOSEMC, _phos(), emc_photon, phos_cut, emc_cut))
        with self.assertRaises(ValueError):
            is_selected_emc_cluster(phos_cut, emc_photon)
        with self.assertRaises(ValueError):
            is_selected_phos_cluster(emc_cut, _phos())
        with self.assertRaises(ValueError):
            is_selected_pair(PairType.PHOSEMC, _phos(), emc_photon, phos_cut, phos_cut)

    def test_cross_subsystem_mixed_decisions(self) -> None:
        """Rejection of either photon rejects the pair."""
        v0_cut = pcm_cut_from_name("analysis")
        phos_cut = phos_cut_from_name("test03")
        self.assertTrue(is_selected_pair(PairType.PCMPHOS, _pcm(), _phos(1.0), v0_cut, phos_cut))
        self.assertFalse(is_selected_pair(PairType.PCMPHOS, _pcm(), _phos(0.25), v0_cut, phos_cut))


if __name__ == "__main__":
    unittest.main()
