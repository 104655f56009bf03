from __future__ import annotations

import ipaddress


def parse_address(target: str) -> str:
    """
    Supports:
      - IPv4 literal: "192.168.0.1"
      - IPv6 literal: "::1"
    """
    target = target.strip()
    if not target:
        raise ValueError("Empty target")

    try:
        ip = ipaddress.ip_address(target)
    except ValueError as e:
        raise ValueError(f"'{target}' is not a valid IP address") from e
    return str(ip)
