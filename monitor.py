#!/usr/bin/env python3
"""
monitor.py

Watch resident/virtual memory of the leak demo (or any process) over time.
Processes are picked by PID or by a substring of their name/command line.

  python3 monitor.py --name leak.py --interval 2
  python3 monitor.py --pid 1234 --duration 60
"""

import argparse
import sys
import time
from collections import namedtuple
from datetime import datetime, timedelta
from typing import List, Optional

import psutil

Sample = namedtuple("Sample", ["pid", "rss", "vms"])


def timestamp() -> str:
    return time.strftime("%H:%M:%S")


def to_mb(n: int) -> float:
    return n / (1024 * 1024)


def find_pids(pattern: str) -> List[int]:
    """Return PIDs whose name or command line contains pattern (case-insensitive)."""
    pattern = pattern.lower()
    pids = []
    for proc in psutil.process_iter(attrs=["pid", "name", "cmdline"]):
        try:
            name = proc.info["name"] or ""
            cmdline = " ".join(proc.info["cmdline"] or [])
            if pattern in name.lower() or pattern in cmdline.lower():
                pids.append(proc.info["pid"])
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return pids


def sample(pid: int) -> Optional[Sample]:
    try:
        mem = psutil.Process(pid).memory_info()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return None
    return Sample(pid, mem.rss, mem.vms)


def format_sample(current: Sample, previous: Optional[Sample] = None) -> str:
    line = f"pid={current.pid} rss={to_mb(current.rss):.2f} MB vms={to_mb(current.vms):.2f} MB"
    if previous is not None:
        line += f" delta={to_mb(current.rss - previous.rss):+.2f} MB"
    return line


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Print memory usage of the leaking process(es) at a fixed interval")
    parser.add_argument("--pid", type=int, action="append",
                        help="PID to monitor (repeatable)")
    parser.add_argument("--name", type=str, default="leak.py",
                        help="Substring of the process name or command line (ignored if --pid is given)")
    parser.add_argument("--interval", type=float, default=1.0,
                        help="Refresh interval in seconds")
    parser.add_argument("--duration", type=float, default=0,
                        help="How long to run in seconds (0 = run forever)")
    args = parser.parse_args(argv)
    if args.interval < 0:
        parser.error("--interval must be >= 0")

    pids = args.pid or [pid for pid in find_pids(args.name) if pid != psutil.Process().pid]
    if not pids:
        print(f"[{timestamp()}] [ERROR] No processes found for: {args.pid or args.name}", file=sys.stderr)
        sys.exit(1)

    end_time = None
    if args.duration > 0:
        end_time = datetime.now() + timedelta(seconds=args.duration)

    previous = {}
    try:
        while True:
            if end_time and datetime.now() >= end_time:
                print(f"[{timestamp()}] [INFO] Duration finished, exiting.", flush=True)
                break

            ts = timestamp()
            for pid in list(pids):
                current = sample(pid)
                if current is None:
                    print(f"[{ts}] pid={pid} gone", flush=True)
                    pids.remove(pid)
                    continue
                print(f"[{ts}] {format_sample(current, previous.get(pid))}", flush=True)
                previous[pid] = current

            if not pids:
                print(f"[{timestamp()}] [INFO] No monitored processes left, exiting.", flush=True)
                break
            time.sleep(args.interval)
    except KeyboardInterrupt:
        print(f"\n[{timestamp()}] [INFO] Stopped by user.", flush=True)


if __name__ == "__main__":
    main()
