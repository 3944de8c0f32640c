#!/usr/bin/env python3
"""
Feed synthetic log traffic into a running logflow dashboard.

Usage:
    python -m scripts.demo_feed [--sources api,worker,db] [--rate 5] [--count 200]

Start ``logflow`` in another terminal first. Each source gets its own
connection and thread; lines mix plain text and JSON across all levels.
"""
import argparse
import json
import random
import sys
import threading
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from logflow.ipc import IPCClient, TransportError
from logflow.logs import classify_line
from logflow.utils import setup_logger

logger = setup_logger("logflow.demo")

PLAIN_LINES = [
    "DEBUG cache lookup key=session:{n}",
    "INFO request handled in {ms}ms",
    "WARN slow response from upstream ({ms}ms)",
    "ERROR connection reset by peer (attempt {n})",
]


def _line(n: int, rng: random.Random) -> str:
    if rng.random() < 0.3:
        return json.dumps(
            {
                "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
                "level": rng.choice(["debug", "info", "warning", "error"]),
                "msg": f"job {n} finished",
                "duration_ms": rng.randint(1, 900),
            }
        )
    return rng.choice(PLAIN_LINES).format(n=n, ms=rng.randint(1, 900))


def _feed(name: str, socket_path: str, rate: float, count: int, seed: int) -> None:
    rng = random.Random(seed)
    try:
        with IPCClient.connect(socket_path) as client:
            client.init_source(name, "pipe")
            for n in range(count):
                client.send_log(classify_line(_line(n, rng), name))
                time.sleep(1.0 / rate)
            client.send_exit(name)
    except TransportError as exc:
        logger.error("%s: %s", name, exc)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--sources", default="api,worker,db", help="Comma-separated source names.")
    parser.add_argument("--rate", type=float, default=5.0, help="Lines per second per source.")
    parser.add_argument("--count", type=int, default=200, help="Lines per source.")
    parser.add_argument("--socket", default=None, help="Dashboard socket path.")
    args = parser.parse_args()

    names = [name.strip() for name in args.sources.split(",") if name.strip()]
    threads = [
        threading.Thread(target=_feed, args=(name, args.socket, args.rate, args.count, idx), daemon=True)
        for idx, name in enumerate(names)
    ]
    for thread in threads:
        thread.start()
    try:
        for thread in threads:
            thread.join()
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
