#!/usr/bin/env python3
"""Generate realistic CSV web server access logs for benchmarking.

Usage:
    python generate_logs.py [lines] > data/raw/access.csv
"""

import random
import sys
from datetime import datetime, timedelta

PATHS = [
    "/", "/index.html", "/about", "/login", "/logout", "/api/users",
    "/api/orders", "/api/products", "/cart", "/checkout", "/health", "/favicon.ico",
]

STATUS_WEIGHTS = {
    200: 70, 201: 5, 204: 3, 301: 3, 304: 4,  # Success / redirect
    400: 3, 401: 2, 403: 2, 404: 5,  # Client errors
    500: 2, 502: 1,  # Server errors
}

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_4)",
    "curl/8.4.0",
    "python-requests/2.31",
    "Googlebot/2.1",
    "",
]

START = datetime(2024, 3, 1, 0, 0, 0)


def generate_log() -> str:
    status = random.choices(list(STATUS_WEIGHTS.keys()), list(STATUS_WEIGHTS.values()))[0]
    ts = START + timedelta(seconds=random.randint(0, 86400))
    ip = f"192.168.{random.randint(0, 3)}.{random.randint(1, 40)}"
    agent = random.choice(USER_AGENTS)
    if "," in agent or ";" in agent:
        agent = f'"{agent}"'
    return ",".join(
        [ip, ts.strftime("%Y-%m-%d %H:%M:%S"), random.choice(PATHS), str(status), agent]
    )


if __name__ == "__main__":
    n = int(sys.argv[1]) if len(sys.argv) > 1 else 100_000
    print("client_address,timestamp,path,status_code,user_agent")
    for _ in range(n):
        print(generate_log())
