"""Run the game host against a relay.

Usage:
    WORDGUESS_RELAY_URL=http://localhost:8000 python scripts/run_host.py

Reads `.env` from the repo root when present.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from dotenv import load_dotenv

from wordguess.host import run_host


def main() -> None:
    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)

    try:
        asyncio.run(run_host())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
