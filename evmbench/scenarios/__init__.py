"""
Benchmark commands for EVM Latency Bench.
"""
