#!/usr/bin/env python3
"""dagopt end-to-end demo.

Usage (after ``uvicorn dagopt.service.app:app``):
    python -m dagopt.demo.run_demo

The script:
1. Sends the sample block to the optimizer service.
2. Prints the DAG the service built for it.
3. Prints the optimized block.
4. Re-optimizes the result to show that nothing further is removed.
5. Sends a block with no instructions to show the error response.
"""

from __future__ import annotations

import sys

import httpx

from dagopt.config import SAMPLE_BLOCK, SERVICE_URL


def banner(msg: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {msg}")
    print(f"{'='*60}")


def _print_dag(dag: dict) -> None:
    for node in dag["nodes"]:
        label = node.get("token", node.get("op", ""))
        operands = [str(node[k]) for k in ("left", "right") if k in node]
        print(f"   Node {node['id']}: {label} {' '.join(operands)} aliases={node['aliases']}")


def main(client: httpx.Client | None = None) -> int:
    if client is None:
        client = httpx.Client(base_url=SERVICE_URL, timeout=15.0)

    # ---- 1. Input ----
    banner("1) Sample block")
    for line in SAMPLE_BLOCK:
        print(f"   {line}")

    # ---- 2. DAG ----
    banner("2) Build DAG")
    resp = client.post("/optimize", json={"lines": SAMPLE_BLOCK, "include_dag": True})
    if resp.status_code != 200:
        print(f"   HTTP {resp.status_code}: {resp.text}")
        return 1
    body = resp.json()
    _print_dag(body["dag"])
    print(f"   Bindings: {body['dag']['bindings']}")

    # ---- 3. Optimized block ----
    banner("3) Optimized block")
    for line in body["optimized"]:
        print(f"   {line}")
    print(f"   {len(SAMPLE_BLOCK)} → {len(body['optimized'])} instructions")

    # ---- 4. Re-optimize ----
    banner("4) Re-optimize the result")
    again = client.post("/optimize", json={"lines": body["optimized"]}).json()
    print(f"   {len(again['optimized'])} instructions on the second pass")

    # ---- 5. Empty block ----
    banner("5) Block without instructions")
    resp = client.post("/optimize", json={"lines": ["no quadruples here"]})
    print(f"   HTTP {resp.status_code}: {resp.json().get('detail', resp.text)}")

    banner("Demo complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
