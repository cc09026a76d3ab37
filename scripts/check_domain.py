#!/usr/bin/env python3
"""
Check a custom domain's DNS against the platform targets.

Usage:
  python scripts/check_domain.py meusite.com.br
  python scripts/check_domain.py https://www.meusite.com.br --timeout 2
"""
from __future__ import annotations

import argparse
import json

from app.services.dns_verifier import DnsPythonResolver, verify_domain
from app.services.hostname import is_blocked_domain, is_valid_hostname, normalize_domain


def main() -> int:
    parser = argparse.ArgumentParser(description="Verify custom domain DNS")
    parser.add_argument("domain", help="Domain or URL to check")
    parser.add_argument("--timeout", type=float, default=None, help="DNS timeout in seconds")
    args = parser.parse_args()

    domain = normalize_domain(args.domain)
    if not is_valid_hostname(domain):
        print(f"[ERROR] invalid domain: {domain!r}")
        return 2
    if is_blocked_domain(domain):
        print(f"[ERROR] reserved domain: {domain}")
        return 2

    result = verify_domain(domain, resolver=DnsPythonResolver(timeout=args.timeout))
    print(json.dumps({"domain": domain, "ok": result.ok, **result.as_details()}, ensure_ascii=False, indent=2))
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
