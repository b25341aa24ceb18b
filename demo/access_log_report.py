#!/usr/bin/env python3
"""Access log analysis demo.

Runs the six summary reports over demo/data/access_log.csv and
partitions the records by status code into demo/output/.

Usage:
    python access_log_report.py [path/to/access_log.csv]
"""

import logging
import os
import sys
import time

# Add parent directory to path for local development
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from logspark import DirectorySink, Pipeline

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

demo_dir = os.path.dirname(os.path.abspath(__file__))
log_path = sys.argv[1] if len(sys.argv) > 1 else os.path.join(demo_dir, "data/access_log.csv")
output_dir = os.path.join(demo_dir, "output")

print("=== Access Log Demo ===")
print(f"Source: {log_path}")
print()

start = time.time()

result = (
    Pipeline(log_path)
    .parse("csv")
    .top_k(3)
    .failure_threshold(0)
    .partition_by("status", sink=DirectorySink(output_dir))
    .run()
)

elapsed = time.time() - start

titles = [
    "Total requests",
    "Requests per status code",
    "Most visited URLs",
    "User agents",
    "Suspicious IPs",
    "Traffic per minute",
]
for title, block in zip(titles, result.report.blocks):
    print(title)
    print("-" * 50)
    print(block or "(none)")
    print()

print(f"Skipped lines: {result.report.skipped_lines}")
if result.partitions is not None:
    print(f"Partitions written to {output_dir}: {', '.join(map(str, result.partitions))}")
else:
    print(f"Partitioning failed: {result.partition_error}")

print(f"\nCompleted in {elapsed:.3f} seconds")
