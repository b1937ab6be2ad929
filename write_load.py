"""
write_load.py — async load script that registers aliases

Every alias is POSTed once; with --dup-ratio a share of them is POSTed again
to exercise the conflict path. Created aliases are written as JSON lines for
read_load.py.

Usage:
  python write_load.py --base http://127.0.0.1:3030 --count 2000 --concurrency 100 --dup-ratio 0.1 --out aliases_created.jsonl
"""
import argparse
import asyncio
import json
import random
import string
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List

import httpx

CONFLICT_STATUSES = (404, 409)

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _rand_destination(alias: str) -> str:
    host = random.choice(["example", "sample", "demo"]) + "." + random.choice(["com", "net", "io"])
    return f"https://{host}/{alias}"

def make_aliases(prefix: str, count: int, n: int = 6) -> List[str]:
    """Unique aliases `<prefix><idx>-<random>`."""
    alphabet = string.ascii_letters + string.digits
    return [f"{prefix}{i}-" + "".join(random.choice(alphabet) for _ in range(n)) for i in range(count)]

def _classify(status: int) -> str:
    if status == 201:
        return "created"
    if status in CONFLICT_STATUSES:
        return "conflict"
    return "error"

async def run_writes(client: httpx.AsyncClient, aliases: List[str], concurrency: int, dup_ratio: float = 0.0):
    """
    POST every alias, then re-POST a `dup_ratio` share of them.

    Returns:
        (created, outcomes): alias -> destination for 201 responses, and a
        Counter of "created"/"conflict"/"error" over all requests.
    """
    created: Dict[str, str] = {}
    outcomes: Counter = Counter()
    sem = asyncio.Semaphore(concurrency)

    async def _post(alias: str, url: str, first: bool):
        async with sem:
            try:
                r = await client.post(f"/{alias}", json={"url": url}, timeout=10)
            except httpx.HTTPError:
                outcomes["error"] += 1
                return
        kind = _classify(r.status_code)
        outcomes[kind] += 1
        if first and kind == "created":
            created[alias] = url

    await asyncio.gather(*(_post(a, _rand_destination(a), True) for a in aliases))

    dups = random.sample(aliases, int(len(aliases) * dup_ratio))
    await asyncio.gather(*(_post(a, _rand_destination(a) + "?dup", False) for a in dups))
    return created, outcomes

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:3030")
    parser.add_argument("--count", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--dup-ratio", type=float, default=0.0, help="share of aliases re-posted to hit conflicts")
    parser.add_argument("--prefix", default="load")
    parser.add_argument("--out", default="aliases_created.jsonl")
    args = parser.parse_args()
    if not 0.0 <= args.dup_ratio <= 1.0:
        parser.error("--dup-ratio must be between 0 and 1")

    aliases = make_aliases(args.prefix, args.count)
    start_iso = _now_iso()
    t0 = time.perf_counter()

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(base_url=args.base, limits=limit) as client:
        created, outcomes = await run_writes(client, aliases, args.concurrency, args.dup_ratio)

    dt = time.perf_counter() - t0
    with open(args.out, "w", encoding="utf-8") as out_f:
        for alias, url in created.items():
            out_f.write(json.dumps({"alias": alias, "url": url}) + "\n")

    total = sum(outcomes.values())
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   writes={total}, created={outcomes['created']}, conflict={outcomes['conflict']}, error={outcomes['error']}")
    if dt > 0:
        print(f"TPS:   {total/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())
