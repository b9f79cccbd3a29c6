from __future__ import annotations
import argparse
import sys
from pathlib import Path
import pandas as pd

from .config import RunConfig, SupplyConfig
from .errors import DecodeFailed
from .timeline import process_video

def main():
    ap = argparse.ArgumentParser(description="Extract supply, selection and production-queue signals from a gameplay video.")
    ap.add_argument("--input", required=True)
    ap.add_argument("--out", default="out")
    ap.add_argument("--profile", default="profiles/profile_rm_1080p.json")
    ap.add_argument("--fps", type=float, default=2.0)
    ap.add_argument("--start", type=float, default=0.0)
    ap.add_argument("--end", type=float, default=420.0)
    ap.add_argument("--diff-threshold", type=float, default=0.08)
    ap.add_argument("--queue-min-conf", type=float, default=0.6)
    ap.add_argument("--templates", default="assets/templates")
    ap.add_argument("--workers", type=int, default=1)

    args = ap.parse_args()
    out_dir = Path(args.out); out_dir.mkdir(parents=True, exist_ok=True)

    run_cfg = RunConfig(fps=args.fps, start_sec=args.start, end_sec=args.end,
                        diff_threshold=args.diff_threshold, queue_min_conf=args.queue_min_conf,
                        workers=args.workers, templates_dir=args.templates)

    try:
        result = process_video(args.input, args.profile, str(out_dir), run_cfg, SupplyConfig())
    except DecodeFailed as e:
        print(f"Decode failed: {e}", file=sys.stderr)
        sys.exit(1)

    signals = result["signals"]
    pd.DataFrame(signals["supply_series"], columns=["t", "used", "total", "conf"]).to_csv(
        out_dir / "supply_series.csv", index=False)
    pd.DataFrame([{**e, "evidence": ";".join(e["evidence"])} for e in result["events"]],
                 columns=["t", "id", "count", "conf", "evidence"]).to_csv(out_dir / "events.csv", index=False)

    print("\n=== DONE ===")
    print(f"Profile: {result['roi_profile']}")
    print(f"Supply samples: {len(signals['supply_series'])}")
    print(f"Selection changes: {len(signals['selection_changes'])}")
    print(f"Queue events: {len(signals['queue_events'])}")
    print(f"Events: {len(result['events'])}")
    if result["diagnostics"]["warnings"]:
        print(f"Warnings: {', '.join(result['diagnostics']['warnings'])}")
    print(f"Outputs written to: {out_dir.resolve()}")

if __name__ == "__main__":
    main()
