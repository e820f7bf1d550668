#!/usr/bin/env python3
"""Benchmark payload mapping: latency (p50, p95, p99) and throughput.

Usage:
  export API_URL=http://localhost:8000 KEYCLOAK_URL=http://localhost:8080
  export KEYCLOAK_REALM=vorto KEYCLOAK_CLIENT_ID=vorto-repository KEYCLOAK_CLIENT_SECRET=...
  python scripts/bench_mapping.py --spec button_device --payload payload.json [--num-requests 100]

Each scripted field starts a sandbox worker, so latency is dominated by
worker startup.
"""
from __future__ import annotations

import argparse
import json
import os
import statistics
import sys
import time

import httpx


def get_token(
    keycloak_url: str,
    realm: str,
    client_id: str,
    client_secret: str,
    username: str,
    password: str,
) -> str:
    url = f"{keycloak_url.rstrip('/')}/realms/{realm}/protocol/openid-connect/token"
    r = httpx.post(
        url,
        data={
            "grant_type": "password",
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=30.0,
    )
    r.raise_for_status()
    return r.json()["access_token"]


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark payload mapping")
    parser.add_argument("--spec", required=True, help="Mapping specification name")
    parser.add_argument("--payload", required=True, help="JSON file with the input payload")
    parser.add_argument("--num-requests", type=int, default=50, help="Number of mapping requests")
    parser.add_argument("--output", type=str, default="", help="Optional summary output file")
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    keycloak_url = os.environ.get("KEYCLOAK_URL", "http://localhost:8080")
    realm = os.environ.get("KEYCLOAK_REALM", "vorto")
    client_id = os.environ.get("KEYCLOAK_CLIENT_ID", "vorto-repository")
    client_secret = os.environ.get("KEYCLOAK_CLIENT_SECRET", "")
    user = os.environ.get("BENCH_USER", "testuser")
    password = os.environ.get("BENCH_PASSWORD", "testpass")

    with open(args.payload, encoding="utf-8") as f:
        payload = json.load(f)

    print("Getting token...")
    token = get_token(keycloak_url, realm, client_id, client_secret, user, password)
    headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

    latencies: list[float] = []
    errors = 0
    print(f"Running {args.num_requests} mapping requests against [{args.spec}]...")
    start_total = time.perf_counter()
    with httpx.Client(timeout=30.0) as client:
        for _ in range(args.num_requests):
            t0 = time.perf_counter()
            r = client.post(f"{api_url}/v1/mappings/{args.spec}", json=payload, headers=headers)
            elapsed = time.perf_counter() - t0
            if r.status_code == 200:
                latencies.append(elapsed)
            else:
                errors += 1
    total_elapsed = time.perf_counter() - start_total

    n = len(latencies)
    if n == 0:
        print("No successful mappings.")
        return 1

    rps = n / total_elapsed
    ordered = sorted(latencies)
    p50 = statistics.median(latencies) * 1000
    p95 = ordered[int(n * 0.95) - 1] * 1000 if n >= 20 else p50
    p99 = ordered[int(n * 0.99) - 1] * 1000 if n >= 100 else p95

    summary = (
        f"Mapping benchmark (spec={args.spec}, requests={n}, errors={errors})\n"
        f"  Throughput: {rps:.2f} req/s\n"
        f"  Latency: p50={p50:.1f} ms, p95={p95:.1f} ms, p99={p99:.1f} ms\n"
        f"  Total time: {total_elapsed:.2f} s\n"
    )
    print(summary)

    if args.output:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(summary)
        print(f"Wrote {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
