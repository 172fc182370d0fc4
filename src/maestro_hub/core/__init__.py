"""Unified model, configuration, logging and concurrency helpers."""
