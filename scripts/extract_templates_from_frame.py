import argparse

from hudsig.calibrate import extract_digit_templates, save_digit_templates
from hudsig.profile import load_profile
from hudsig.templates import load_separator

def main():
    ap = argparse.ArgumentParser(description="Cut digit templates from a frame showing a known supply value.")
    ap.add_argument("--frame", required=True)
    ap.add_argument("--used", default="12")
    ap.add_argument("--total", default="17")
    ap.add_argument("--profile", default="profiles/profile_rm_854x480.json")
    ap.add_argument("--out", default="assets/templates/digits")
    ap.add_argument("--slash", default="assets/templates/digits/slash.jpg")
    args = ap.parse_args()

    profile = load_profile(args.profile)
    templates = extract_digit_templates(args.frame, profile.supply.strip, args.used, args.total,
                                        separator=load_separator(args.slash))
    paths = save_digit_templates(templates, args.out)
    h, w = next(iter(templates.values())).shape[:2]
    print(f"wrote {len(paths)} templates ({w}x{h}) to {args.out}")

if __name__ == "__main__":
    main()
