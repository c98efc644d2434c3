#!/usr/bin/env python3
"""
leak.py - intentional memory leak for profiler practice.

Appends the same string to a module-level list every 10ms and keeps a running
estimate of the leaked size, until the estimate goes over the 32-bit signed
integer max. Attach a profiler (or run monitor.py against the PID) and watch
the heap grow.

  python3 leak.py
  kill -USR1 <pid>    # interrupt the current sleep, the loop keeps going
"""

import argparse
import os
import signal
import sys
import time
from typing import Callable, List, Optional

import psutil

import size_oracle
from size_oracle import SizeOracle

# The leak itself. Never cleared.
LEAK: List[str] = []

ELEMENT = "VERY STRING. MUCH INFORMATION."
THRESHOLD = 2_147_483_647  # max 32-bit signed int, a little over 2GB
REPORT_EVERY = 1000
INTERVAL = 0.010  # seconds
MB = 1_000_000  # decimal, not MiB


def timestamp() -> str:
    return time.strftime("%H:%M:%S")


def info(message: str):
    print(f"[{timestamp()}] {message}", flush=True)


def error(message: str):
    print(f"[{timestamp()}] {message}", file=sys.stderr, flush=True)


def format_size(total: int) -> str:
    if total > MB:
        return f"{total // MB}MB and {total % MB}B"
    return f"{total}B"


def resident_mb() -> float:
    return psutil.Process().memory_info().rss / 1024**2


class LeakDriver:
    def __init__(
        self,
        oracle: SizeOracle,
        buffer: Optional[List[str]] = None,
        element: str = ELEMENT,
        threshold: int = THRESHOLD,
        report_every: int = REPORT_EVERY,
        interval: float = INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.oracle = oracle
        self.buffer = LEAK if buffer is None else buffer
        self.element = element
        self.threshold = threshold
        self.report_every = report_every
        self.interval = interval
        self.sleep = sleep
        self.total = 0
        self.sleeping = False

    def seed(self) -> int:
        # Size of the list object alone, elements are added as they come
        self.total = self.oracle.measure(self.buffer)
        info(f"Size of leak without elements (only list): {self.total}")
        return self.total

    def step(self) -> bool:
        """Append one element. Returns True once the threshold is crossed."""
        new_element = self.element
        self.buffer.append(new_element)
        self.total += self.oracle.measure(new_element)
        value = format_size(self.total)

        if len(self.buffer) % self.report_every == 0:
            info(f"Size of leak is {value} with {len(self.buffer)} elements")

        if self.total > self.threshold:
            info(f"Size of leak is over {self.threshold} which is the 32-bit signed integer max!")
            return True
        return False

    def pause(self):
        try:
            self.sleeping = True
            self.sleep(self.interval)
            self.sleeping = False
        except InterruptedError as e:
            self.sleeping = False
            error(f"Leak driver interrupted! Error: {e}")

    def run(self) -> int:
        info("Starting memory leak example")
        info(f"PID={os.getpid()} RSS={resident_mb():.2f} MB")
        self.seed()
        while True:
            if self.step():
                break
            self.pause()
        info(f"Ending memory leak example: {len(self.buffer)} elements, RSS={resident_mb():.2f} MB")
        return self.total


def install_interrupt_handler(driver: LeakDriver):
    if not hasattr(signal, "SIGUSR1"):
        return

    def handle_sigusr1(signum, frame):
        # Only a sleep can be interrupted; a signal landing mid-step is dropped
        if driver.sleeping:
            # One interrupt per sleep
            driver.sleeping = False
            raise InterruptedError(f"caught signal {signum} while sleeping")

    signal.signal(signal.SIGUSR1, handle_sigusr1)


def main(argv=None):
    p = argparse.ArgumentParser(
        add_help=False,
        description="Leak memory on purpose until the estimated leak size passes 2147483647 bytes. "
                    "Extra arguments are ignored.")
    p.parse_known_args(argv)

    # Runtime measurement hook, must be set before any driver exists
    size_oracle.initialize(size_oracle.shallow_size)
    driver = LeakDriver(size_oracle.current())
    install_interrupt_handler(driver)

    try:
        driver.run()
    except KeyboardInterrupt:
        print(f"\n[{timestamp()}] Stopped leaking memory at {len(driver.buffer)} elements.", flush=True)


if __name__ == "__main__":
    main()
