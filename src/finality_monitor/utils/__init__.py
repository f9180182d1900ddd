"""Helpers for talking to the node and pacing the sampling loop."""
