"""Synthetic photon sample for running the HBT task end to end.

The module doubles as an input script for the CLI (it defines
`load_input(options)`) and as a standalone walkthrough.

Run from repository root:
    PYTHONPATH=src python3 examples/toy_events.py --n-events 200
    PYTHONPATH=src python3 -m photonhbt.cli --process-phos-phos --process-pcm-phos \
        --input-script examples/toy_events.py \
        --custom-script examples/custom_scripts/counter_table.py
"""

from __future__ import annotations

import argparse
import math
from random import Random

from photonhbt import (
    CandidateTable,
    Event,
    HBTOptions,
    PhotonCandidate,
    PhotonHBT,
    Subsystem,
    V0Leg,
)

PHOS_ETA_MAX = 0.12
PHOS_PHI_RANGE = (250.0 * math.pi / 180.0, 320.0 * math.pi / 180.0)
PCM_ETA_MAX = 0.9


def make_event(collision_id: int, n_pcm: int, n_phos: int, rng: Random) -> Event:
    """Random collision with a Gaussian z-vertex and a few bad events mixed in."""
    return Event(
        collision_id=collision_id,
        ngpcm=n_pcm,
        ngphos=n_phos,
        pos_z=rng.gauss(0.0, 6.0),
        num_contrib=0 if rng.random() < 0.02 else rng.randint(1, 60),
        mult_ntracks_pv=float(rng.randint(0, 120)),
        sel8=rng.random() > 0.05,
        is_phos_cpv_readout=rng.random() > 0.1,
    )


def make_leg(rng: Random) -> V0Leg:
    return V0Leg(
        pt=rng.expovariate(1.0 / 0.4),
        eta=rng.uniform(-0.9, 0.9),
        tpc_ncls_found=rng.randint(20, 159),
        tpc_chi2_ncl=rng.uniform(0.5, 5.0),
        tpc_nsigma_el=rng.gauss(0.0, 1.2),
        tpc_nsigma_pi=rng.gauss(5.0, 1.5),
        dca_xy=rng.gauss(0.0, 0.5),
        its_ncls=rng.randint(0, 7),
    )


def make_pcm_photon(collision_id: int, candidate_id: int, rng: Random) -> PhotonCandidate:
    """Conversion photon with loose topology so that the named cuts have work to do."""
    return PhotonCandidate(
        Subsystem.PCM,
        pt=rng.expovariate(1.0 / 0.6),
        eta=rng.uniform(-PCM_ETA_MAX, PCM_ETA_MAX),
        phi=rng.uniform(0.0, 2.0 * math.pi),
        collision_id=collision_id,
        candidate_id=candidate_id,
        v0_radius=rng.uniform(0.5, 120.0),
        cospa=1.0 - abs(rng.gauss(0.0, 0.002)),
        psipair=rng.gauss(0.0, 0.08),
        chi2_kf=rng.expovariate(1.0 / 8.0),
        alpha=rng.uniform(-1.0, 1.0),
        qt=abs(rng.gauss(0.0, 0.03)),
        legs=(make_leg(rng), make_leg(rng)),
    )


def make_phos_cluster(collision_id: int, candidate_id: int, rng: Random) -> PhotonCandidate:
    """PHOS cluster inside the detector acceptance."""
    energy = 0.1 + rng.expovariate(1.0 / 0.8)
    return PhotonCandidate(
        Subsystem.PHOS,
        pt=energy,
        eta=rng.uniform(-PHOS_ETA_MAX, PHOS_ETA_MAX),
        phi=rng.uniform(*PHOS_PHI_RANGE),
        collision_id=collision_id,
        candidate_id=candidate_id,
        energy=energy,
        ncells=rng.randint(1, 12),
        m02=rng.uniform(0.05, 1.5),
        time=rng.gauss(0.0, 40e-9),
        track_match_distance=rng.expovariate(1.0 / 8.0),
    )


def generate(n_events: int, seed: int = 1234) -> tuple[list[Event], dict[Subsystem, CandidateTable]]:
    """Build events together with PCM and PHOS candidate tables."""
    rng = Random(seed)
    events: list[Event] = []
    pcm: list[PhotonCandidate] = []
    phos: list[PhotonCandidate] = []
    next_id = 0
    for collision_id in range(n_events):
        n_pcm = rng.randint(0, 4)
        n_phos = rng.randint(0, 5)
        events.append(make_event(collision_id, n_pcm, n_phos, rng))
        for _ in range(n_pcm):
            pcm.append(make_pcm_photon(collision_id, next_id, rng))
            next_id += 1
        for _ in range(n_phos):
            phos.append(make_phos_cluster(collision_id, next_id, rng))
            next_id += 1
    tables = {
        Subsystem.PCM: CandidateTable(Subsystem.PCM, pcm),
        Subsystem.PHOS: CandidateTable(Subsystem.PHOS, phos),
    }
    return events, tables


def load_input(options: HBTOptions):
    """Entry point used by `photon-hbt --input-script`."""
    return generate(n_events=500)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run photon HBT pairing on a synthetic sample.")
    parser.add_argument("--n-events", type=int, default=500)
    parser.add_argument("--seed", type=int, default=1234)
    parser.add_argument("--ndepth", type=int, default=10)
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    events, tables = generate(args.n_events, seed=args.seed)
    task = PhotonHBT(
        HBTOptions(
            ndepth=args.ndepth,
            process_pcm_pcm=True,
            process_phos_phos=True,
            process_pcm_phos=True,
        )
    )
    for result in task.run(events, tables):
        print(
            f"{result.pair_type.name}: same {result.same.n_pairs} pairs in {result.same.n_events} events, "
            f"mixed {result.mixed.n_pairs} pairs in {result.mixed.n_event_pairs} event pairs"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
