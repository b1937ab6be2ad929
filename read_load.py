"""
read_load.py — async load script that follows alias redirects and audits counts

Reads the aliases written by write_load.py, hits them at random, checks every
307 points at the recorded destination, then compares the per-alias increase
in GET /stats against the redirects it actually received. Any difference
means visits were lost or double counted.

Usage:
  python read_load.py --base http://127.0.0.1:3030 --in aliases_created.jsonl --count 15000 --concurrency 200
"""
import argparse
import asyncio
import json
import random
import sys
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Tuple

import httpx

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def load_aliases(path) -> Dict[str, str]:
    """alias -> destination from a write_load.py JSON-lines file."""
    aliases = {}
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            if obj.get("alias") and obj.get("url"):
                aliases[obj["alias"]] = obj["url"]
    return aliases

async def fetch_counts(client: httpx.AsyncClient) -> Dict[str, int]:
    r = await client.get("/stats", timeout=10)
    r.raise_for_status()
    return {row["alias"]: row["count"] for row in r.json()}

def count_mismatches(before: Dict[str, int], after: Dict[str, int], hits: Counter) -> List[Tuple[str, int, int]]:
    """(alias, redirects received, stats increase) wherever the two differ."""
    out = []
    for alias in sorted(set(hits) | set(after)):
        delta = after.get(alias, 0) - before.get(alias, 0)
        if delta != hits.get(alias, 0):
            out.append((alias, hits.get(alias, 0), delta))
    return out

async def run_reads(client: httpx.AsyncClient, aliases: Dict[str, str], count: int, concurrency: int):
    """
    Issue `count` random redirects.

    Returns:
        (hits, wrong_location, failed): Counter of 307s per alias, number of
        307s whose Location differed from the recorded destination, number of
        non-307 or errored requests.
    """
    names = list(aliases)
    hits: Counter = Counter()
    wrong_location = 0
    failed = 0
    sem = asyncio.Semaphore(concurrency)

    async def _hit(alias: str):
        nonlocal wrong_location, failed
        async with sem:
            try:
                r = await client.get(f"/{alias}", follow_redirects=False, timeout=10)
            except httpx.HTTPError:
                failed += 1
                return
        if r.status_code != 307:
            failed += 1
            return
        hits[alias] += 1
        if r.headers.get("location") != aliases[alias]:
            wrong_location += 1

    await asyncio.gather(*(_hit(random.choice(names)) for _ in range(count)))
    return hits, wrong_location, failed

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:3030")
    parser.add_argument("--in", dest="aliases_file", default="aliases_created.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    args = parser.parse_args()

    aliases = load_aliases(args.aliases_file)
    if not aliases:
        print(f"No aliases found in {args.aliases_file}. Run write_load.py first.")
        return 1

    start_iso = _now_iso()
    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(base_url=args.base, limits=limit) as client:
        before = await fetch_counts(client)
        t0 = time.perf_counter()
        hits, wrong_location, failed = await run_reads(client, aliases, args.count, args.concurrency)
        dt = time.perf_counter() - t0
        after = await fetch_counts(client)

    mismatches = count_mismatches(before, after, hits)
    ok = sum(hits.values())
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   reads={args.count}, ok={ok}, fail={failed}, wrong_location={wrong_location}")
    if dt > 0:
        print(f"RPS:   {ok/dt:.1f} req/s")
    # Other clients hitting the server at the same time also show up here
    print(f"STATS: {len(mismatches)} aliases whose count change differs from redirects received")
    for alias, got, delta in mismatches[:10]:
        print(f"  {alias}: redirects={got} stats_delta={delta}")
    return 1 if mismatches or wrong_location else 0

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
