"""Batch invitation dispatch for organizations."""
