#!/usr/bin/env python3
"""Web log analysis demo.

Runs a full job over CSV access logs in a local directory and prints the
reports it wrote.

Usage:
    python generate_logs.py 100000 > data/raw/access.csv
    python analyze_logs.py [data_dir]
"""

import logging
import os
import sys
import time

# Add parent directory to path for local development
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from logshark import JobConfig, LocalBlobStore, get_formatter, run_job
from logshark.reports import standard_reports

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

data_dir = sys.argv[1] if len(sys.argv) > 1 else os.path.join(os.path.dirname(__file__), "data")

config = JobConfig.from_env(base=JobConfig(partition_root="partitions"))
blob_store = LocalBlobStore(data_dir)

print("=== Web Log Analysis Demo ===")
print(f"Input: {data_dir}/{config.input_prefix}")
print()

extension = get_formatter(config.report_format).extension

start = time.time()
summary = run_job(config, blob_store)
elapsed = time.time() - start

for spec in standard_reports(config):
    if spec.name not in summary.reports_written:
        continue
    key = f"{config.output_prefix.rstrip('/')}/{spec.name}.{extension}"
    print(f"--- {spec.name} ---")
    for line in blob_store.read_lines(key):
        print(line)
    print()

print("\n".join(summary.to_lines()))
print()
print(f"Completed in {elapsed:.3f} seconds")
