"""Send a trigger to the relay, the way a chat bot or overlay would.

Usage:
    python scripts/send_trigger.py guess Ana gato
    python scripts/send_trigger.py event Ana double_points --duration 20
    python scripts/send_trigger.py event Ana nueva_ronda
"""

from __future__ import annotations

import argparse
import json
import os

import httpx


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("kind", choices=["guess", "event"])
    parser.add_argument("user")
    parser.add_argument("value", help="guessed word, or event name")
    parser.add_argument("--duration", type=int, default=None, help="double_points duration in seconds")
    parser.add_argument("--relay", default=os.environ.get("WORDGUESS_RELAY_URL", "http://localhost:8000"))
    args = parser.parse_args()

    if args.kind == "guess":
        params = {"user": args.user, "word": args.value}
    else:
        params = {"user": args.user, "event": args.value}
        if args.duration is not None:
            params["duration"] = str(args.duration)

    resp = httpx.post(f"{args.relay.rstrip('/')}/{args.kind}", params=params, timeout=5.0)
    print(resp.status_code, json.dumps(resp.json(), indent=2, ensure_ascii=False))
    return 0 if resp.is_success else 1


if __name__ == "__main__":
    raise SystemExit(main())
