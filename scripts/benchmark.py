#!/usr/bin/env python3
"""
Benchmark Script for KV-Loop

Measures the cost of the codec and dispatcher in-process and, when a
server address is given, round-trip throughput over the network.

Usage:
    python scripts/benchmark.py                          # In-process benchmarks
    python scripts/benchmark.py --operations 50000       # Custom operation count
    python scripts/benchmark.py --port 8080              # Also benchmark a running server
    python scripts/benchmark.py --profile                # Enable cProfile
"""

import argparse
import os
import random
import statistics
import string
import sys
import time
from typing import Any, Callable, Dict, List

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kvloop.client import KVClient
from kvloop.protocol.codec import decode_request, encode_request, encode_response
from kvloop.protocol.dispatcher import CommandDispatcher
from kvloop.store.kvstore import KVStore


def random_bytes(length: int) -> bytes:
    """Generate a random alphanumeric byte string."""
    return ''.join(random.choices(string.ascii_letters + string.digits, k=length)).encode()


def measure_time(func: Callable, iterations: int = 1) -> Dict[str, float]:
    """Measure execution time statistics."""
    times = []

    for _ in range(iterations):
        start = time.perf_counter()
        func()
        elapsed = (time.perf_counter() - start) * 1000  # Convert to ms
        times.append(elapsed)

    return {
        "min_ms": min(times),
        "max_ms": max(times),
        "mean_ms": statistics.mean(times),
        "median_ms": statistics.median(times),
        "total_ms": sum(times),
    }


class Benchmark:
    """Collection of benchmarks for KV-Loop components."""

    def __init__(
            self,
            operations: int = 10000,
            key_size: int = 16,
            value_size: int = 64,
            host: str = "127.0.0.1",
            port: int = None,
            batch: int = 100,
    ):
        self.operations = operations
        self.host = host
        self.port = port
        self.batch = batch

        # Pre-generate test data
        self.keys = [random_bytes(key_size) for _ in range(operations)]
        self.values = [random_bytes(value_size) for _ in range(operations)]

    def _finish(self, stats: Dict[str, Any], operation: str) -> Dict[str, Any]:
        stats["ops_per_second"] = self.operations / (stats["total_ms"] / 1000)
        stats["operation"] = operation
        stats["count"] = self.operations
        return stats

    def benchmark_encode_request(self) -> Dict[str, Any]:
        """Benchmark request encoding."""
        def run():
            for i in range(self.operations):
                encode_request([b"set", self.keys[i], self.values[i]])

        return self._finish(measure_time(run), "Encode request")

    def benchmark_decode_request(self) -> Dict[str, Any]:
        """Benchmark request decoding."""
        frames = [
            encode_request([b"set", self.keys[i], self.values[i]])
            for i in range(self.operations)
        ]

        def run():
            for frame in frames:
                decode_request(frame)

        return self._finish(measure_time(run), "Decode request")

    def benchmark_dispatch_set(self) -> Dict[str, Any]:
        """Benchmark SET through the dispatcher."""
        dispatcher = CommandDispatcher(KVStore())

        def run():
            for i in range(self.operations):
                dispatcher.dispatch([b"set", self.keys[i], self.values[i]])

        return self._finish(measure_time(run), "Dispatch SET")

    def benchmark_dispatch_get(self) -> Dict[str, Any]:
        """Benchmark GET hits through the dispatcher, including encoding."""
        store = KVStore()
        for i in range(self.operations):
            store.set(self.keys[i], self.values[i])
        dispatcher = CommandDispatcher(store)

        def run():
            for i in range(self.operations):
                response = dispatcher.dispatch([b"get", self.keys[i]])
                encode_response(response.status, response.payload)

        return self._finish(measure_time(run), "Dispatch GET + encode")

    def benchmark_network_roundtrip(self) -> Dict[str, Any]:
        """Benchmark one request per round trip against a live server."""
        with KVClient(self.host, self.port) as client:
            def run():
                for i in range(self.operations):
                    client.execute(b"set", self.keys[i], self.values[i])

            return self._finish(measure_time(run), "Network SET (serial)")

    def benchmark_network_pipeline(self) -> Dict[str, Any]:
        """Benchmark pipelined GETs against a live server."""
        with KVClient(self.host, self.port) as client:
            def run():
                for start in range(0, self.operations, self.batch):
                    end = min(start + self.batch, self.operations)
                    client.pipeline([b"get", self.keys[i]] for i in range(start, end))

            return self._finish(measure_time(run), f"Network GET (pipeline {self.batch})")

    def run_all(self) -> List[Dict[str, Any]]:
        """Run all benchmarks."""
        benchmarks = [
            ("Encode request", self.benchmark_encode_request),
            ("Decode request", self.benchmark_decode_request),
            ("Dispatch SET", self.benchmark_dispatch_set),
            ("Dispatch GET", self.benchmark_dispatch_get),
        ]
        if self.port is not None:
            benchmarks += [
                ("Network SET", self.benchmark_network_roundtrip),
                ("Network pipeline", self.benchmark_network_pipeline),
            ]

        results = []
        for name, func in benchmarks:
            print(f"Running: {name}...", end=" ", flush=True)
            result = func()
            print(f"{result['ops_per_second']:,.0f} ops/sec")
            results.append(result)

        return results


def print_results(results: List[Dict[str, Any]]):
    """Print benchmark results in a table."""
    print()
    print("=" * 70)
    print("                        BENCHMARK RESULTS")
    print("=" * 70)
    print(f"{'Operation':<30} {'Ops/sec':>12} {'Mean (ms)':>12} {'Total (ms)':>12}")
    print("-" * 70)

    for r in results:
        print(f"{r['operation']:<30} {r['ops_per_second']:>12,.0f} "
              f"{r['mean_ms']:>12.3f} {r['total_ms']:>12.1f}")

    print("=" * 70)


def main():
    parser = argparse.ArgumentParser(
        description="Benchmark KV-Loop components",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--operations", "-n",
        type=int,
        default=10000,
        help="Number of operations per benchmark"
    )
    parser.add_argument("--key-size", type=int, default=16, help="Size of keys")
    parser.add_argument("--value-size", type=int, default=64, help="Size of values")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Server host")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Server port; network benchmarks are skipped when omitted"
    )
    parser.add_argument("--batch", type=int, default=100, help="Pipeline batch size")
    parser.add_argument("--profile", action="store_true", help="Enable cProfile profiling")

    args = parser.parse_args()

    print(f"KV-Loop Benchmark")
    print(f"=================")
    print(f"Operations per test: {args.operations:,}")
    print(f"Key size: {args.key_size}")
    print(f"Value size: {args.value_size}")
    print()

    benchmark = Benchmark(
        operations=args.operations,
        key_size=args.key_size,
        value_size=args.value_size,
        host=args.host,
        port=args.port,
        batch=args.batch,
    )

    if args.profile:
        import cProfile
        import pstats

        profiler = cProfile.Profile()
        profiler.enable()
        results = benchmark.run_all()
        profiler.disable()

        print_results(results)

        print()
        print("Profiling Results (top 20):")
        print("-" * 70)
        stats = pstats.Stats(profiler)
        stats.sort_stats('cumulative')
        stats.print_stats(20)
    else:
        results = benchmark.run_all()
        print_results(results)


if __name__ == "__main__":
    main()
