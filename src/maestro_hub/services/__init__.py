"""Aggregation services over the provider adapters."""
