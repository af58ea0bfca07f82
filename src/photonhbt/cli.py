"""Command-line interface for running photon HBT pairing."""

from __future__ import annotations

import argparse
import importlib.util
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from .histograms import HistogramSink
from .models import CandidateTable, Event, HBTOptions, PairKind, Subsystem
from .task import PhotonHBT

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    defaults = HBTOptions()
    parser = argparse.ArgumentParser(
        prog="photon-hbt",
        description="Fill same-event and mixed-event photon-pair HBT histograms.",
    )
    parser.add_argument(
        "--input-script",
        default=None,
        help="Path to Python file with load_input(options) returning (events, tables).",
    )
    parser.add_argument(
        "--cfg-pcm-cuts",
        default=defaults.cfg_pcm_cuts,
        help="Comma separated list of V0 photon cuts.",
    )
    parser.add_argument(
        "--cfg-phos-cuts",
        default=defaults.cfg_phos_cuts,
        help="Comma separated list of PHOS photon cuts.",
    )
    parser.add_argument(
        "--cfg-emc-cuts",
        default=defaults.cfg_emc_cuts,
        help="Comma separated list of EMCal photon cuts.",
    )
    parser.add_argument("--ndepth", type=int, default=defaults.ndepth, help="Depth for event mixing.")
    parser.add_argument("--process-pcm-pcm", action="store_true", help="Pairing PCM-PCM.")
    parser.add_argument("--process-phos-phos", action="store_true", help="Pairing PHOS-PHOS.")
    parser.add_argument("--process-pcm-phos", action="store_true", help="Pairing PCM-PHOS.")
    parser.add_argument(
        "--custom-script",
        default=None,
        help="Path to Python file with process(sink, context) function.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> HBTOptions:
    """Map parsed CLI arguments onto task options."""
    return HBTOptions(
        cfg_pcm_cuts=args.cfg_pcm_cuts,
        cfg_phos_cuts=args.cfg_phos_cuts,
        cfg_emc_cuts=args.cfg_emc_cuts,
        ndepth=args.ndepth,
        process_pcm_pcm=args.process_pcm_pcm,
        process_phos_phos=args.process_phos_phos,
        process_pcm_phos=args.process_pcm_phos,
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: configure task, load input, run pairing, optional custom hook."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    options = options_from_args(args)
    task = PhotonHBT(options)
    if task.is_dummy:
        return 0
    if not args.input_script:
        raise ValueError("An --input-script is required when a pair type is enabled.")

    events, tables = load_input(args.input_script, options)
    task.run(events, tables)
    print_summary(task.sink)

    if args.custom_script:
        run_custom_script(
            script_path=args.custom_script,
            sink=task.sink,
            context={
                "input_script": args.input_script,
                "options": options,
                "pair_types": task.pair_types,
                "n_events": len(events),
            },
        )
    return 0


def load_input(
    script_path: str, options: HBTOptions
) -> tuple[Sequence[Event], Mapping[Subsystem, CandidateTable]]:
    """Execute user-supplied `load_input(options)` and validate its result."""
    module = _load_module(script_path)
    loader = getattr(module, "load_input", None)
    if loader is None or not callable(loader):
        raise ValueError(f"Input script {script_path} must define callable load_input(options).")
    events, tables = loader(options)
    for subsystem, table in tables.items():
        if table.subsystem is not subsystem:
            raise ValueError(
                f"Input script {script_path} returned a {table.subsystem.value} table under {subsystem.value}."
            )
    logger.info("Loaded %d events from %s", len(events), script_path)
    return events, tables


def print_summary(sink: HistogramSink) -> None:
    """Print event counters and per-slot pair counts."""
    for pair_type in sink.event_pair_types():
        counts = sink.event_counts(pair_type)
        print(f"{pair_type.name} events: " + ", ".join(f"{k}={v:g}" for k, v in counts.items()))
    for pair_type, cut1, cut2 in sink.slot_keys():
        n_same = sink.n_pairs(pair_type, cut1, cut2, PairKind.SAME)
        n_mixed = sink.n_pairs(pair_type, cut1, cut2, PairKind.MIXED)
        print(f"{pair_type.name} {cut1}_{cut2}: same={n_same:g} mixed={n_mixed:g}")


def run_custom_script(script_path: str, sink: HistogramSink, context: dict[str, Any]) -> None:
    """Execute user-supplied post-processing callback `process(sink, context)`."""
    module = _load_module(script_path)
    process = getattr(module, "process", None)
    if process is None or not callable(process):
        raise ValueError(
            f"Custom script {script_path} must define callable process(sink, context)."
        )
    process(sink, context)


def _load_module(script_path: str):
    """Import a Python module from an arbitrary file path."""
    path = Path(script_path)
    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot import script: {script_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


if __name__ == "__main__":
    raise SystemExit(main())
