import argparse
import json

from hudsig.evaluate import evaluate_events, events_from_result

def main():
    ap = argparse.ArgumentParser(description="Score extracted events against a ground-truth list.")
    ap.add_argument("--result", required=True, help="result.json from a run")
    ap.add_argument("--truth", required=True, help="JSON list of {t, id, count}")
    ap.add_argument("--tol", type=float, default=3.0)
    args = ap.parse_args()

    with open(args.result, encoding="utf-8") as f:
        pred = events_from_result(json.load(f))
    with open(args.truth, encoding="utf-8") as f:
        gt = json.load(f)

    res = evaluate_events(pred, gt, tol_sec=args.tol)
    print(json.dumps(res.to_dict(), indent=2))

if __name__ == "__main__":
    main()
