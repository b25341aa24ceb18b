#!/usr/bin/env python3
"""Generate realistic CSV web server access logs for benchmarking."""

import random
import sys
from datetime import datetime, timedelta

PATHS = [
    "/home", "/products", "/products/{id}", "/checkout", "/cart",
    "/api/users", "/api/orders", "/login", "/logout", "/search"
]

STATUS_WEIGHTS = {
    200: 70, 201: 5, 301: 5,   # Success / redirect
    400: 3, 403: 2, 404: 10,   # Client errors
    500: 4, 503: 1             # Server errors
}

USER_AGENTS = ["Mozilla/5.0", "Chrome/90.0", "Safari/14.0", "Edge/91.0", "curl/7.68"]

START = datetime(2024, 2, 17)


def generate_log():
    status = random.choices(list(STATUS_WEIGHTS.keys()), list(STATUS_WEIGHTS.values()))[0]
    path = random.choice(PATHS).replace("{id}", str(random.randint(1, 500)))
    ts = START + timedelta(seconds=random.randint(0, 3600 * 24))
    # A small pool of IPs so some of them pile up failures
    ip = f"10.0.{random.randint(0, 15)}.{random.randint(1, 30)}"
    return ",".join([
        ip,
        ts.strftime("%Y-%m-%d %H:%M:%S"),
        path,
        str(status),
        random.choice(USER_AGENTS),
    ])


if __name__ == "__main__":
    n = int(sys.argv[1]) if len(sys.argv) > 1 else 1_000_000
    print("ip,timestamp,url,status,user_agent")
    for _ in range(n):
        print(generate_log())
