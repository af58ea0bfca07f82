"""Example custom callback: write event counters and slot pair counts as CSV."""

from __future__ import annotations

from pathlib import Path

from photonhbt.export import event_counter_dataframe, slot_summary_dataframe


def process(sink, context):
    """Dump the event-selection counters and the same/mixed pair yields."""
    out_dir = Path(context["input_script"]).with_name("hbt_output")
    out_dir.mkdir(exist_ok=True)
    counters = event_counter_dataframe(sink)
    slots = slot_summary_dataframe(sink)
    slots["mixed_per_same"] = slots["n_mixed"] / slots["n_same"].where(slots["n_same"] > 0)
    counters.to_csv(out_dir / "event_counters.csv", index=False)
    slots.to_csv(out_dir / "pair_slots.csv", index=False)
    print(f"Wrote {len(counters)} counter rows and {len(slots)} slot rows to {out_dir}")
