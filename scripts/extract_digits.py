import argparse
import json
from pathlib import Path

import cv2

from hudsig.calibrate import rank_digit_candidates
from hudsig.decode import decode_frames
from hudsig.profile import load_profile
from hudsig.roi import load_color

def main():
    ap = argparse.ArgumentParser(description="Save the most textured supply glyph crops as template candidates.")
    ap.add_argument("--input", required=True)
    ap.add_argument("--profile", default="profiles/profile_rm_854x480.json")
    ap.add_argument("--out", default="assets/templates/digits/candidates")
    ap.add_argument("--fps", type=float, default=1.0)
    ap.add_argument("--start", type=float, default=0.0)
    ap.add_argument("--end", type=float, default=120.0)
    ap.add_argument("--per-box", type=int, default=12)
    args = ap.parse_args()

    out = Path(args.out); out.mkdir(parents=True, exist_ok=True)
    profile = load_profile(args.profile)
    frames = decode_frames(args.input, out / "_frames", args.fps, args.start, args.end)

    best = rank_digit_candidates(frames, profile.supply, per_box=args.per_box)
    manifest = []
    for cand in best:
        name = f"{cand.box_type}_{cand.index}_t{cand.t:.1f}".replace(".", "_") + ".png"
        cv2.imwrite(str(out / name), load_color(cand.frame, cand.roi))
        manifest.append({**cand.to_dict(), "out_file": str(out / name)})

    (out / "manifest.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    print(f"Saved {len(best)} candidate digit crops to {out}")

if __name__ == "__main__":
    main()
