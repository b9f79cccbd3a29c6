import argparse

from hudsig.calibrate import calibrate_supply
from hudsig.profile import load_profile, save_profile
from hudsig.roi import Roi

def main():
    ap = argparse.ArgumentParser(description="Derive supply glyph boxes from one sample frame.")
    ap.add_argument("frame")
    ap.add_argument("profile")
    ap.add_argument("--strip", default="700,0,150,30", help="supply strip as x,y,w,h")
    ap.add_argument("--boxes", type=int, default=3)
    args = ap.parse_args()

    x, y, w, h = (int(v) for v in args.strip.split(","))
    profile = load_profile(args.profile)
    profile.supply = calibrate_supply(args.frame, Roi(x, y, w, h), boxes_per_side=args.boxes)
    profile.extra["note"] = "Auto-calibrated from frame using green/white masks. Verify ROI manually."
    save_profile(profile, args.profile)

    print("updated", args.profile)
    print("used_boxes", [b.to_dict() for b in profile.supply.used_boxes])
    print("total_boxes", [b.to_dict() for b in profile.supply.total_boxes])

if __name__ == "__main__":
    main()
