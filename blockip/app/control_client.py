from __future__ import annotations

import os
import sys

import httpx
from dotenv import load_dotenv

USAGE = "Usage: control_client.py <ip> [--permanent]\n"


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not 1 <= len(args) <= 2 or args[0].startswith("-") or (len(args) == 2 and args[1] != "--permanent"):
        sys.stderr.write(USAGE)
        return 2

    load_dotenv()

    ip = args[0]
    permanent = len(args) == 2
    base_url = os.getenv("BLOCK_IP_BASE_URL", "http://blockip:8090").rstrip("/")
    control_token = os.getenv("BLOCK_IP_CONTROL_TOKEN", "").strip()
    if not control_token:
        sys.stderr.write("BLOCK_IP_CONTROL_TOKEN is not configured.\n")
        return 1

    try:
        with httpx.Client(timeout=10.0) as client:
            response = client.post(
                f"{base_url}/block-ip",
                json={"ip": ip, "permanent": permanent},
                headers={"X-Block-Ip-Control-Token": control_token},
            )
        output = response.text.strip()
        if output:
            print(output)
        return 0 if response.status_code < 400 else 1
    except Exception as exc:
        sys.stderr.write(f"Block-IP call failed: {exc}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
