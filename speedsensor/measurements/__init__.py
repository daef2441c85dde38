"""Speedtest invocation, retry and result normalization."""
