"""Kernel services: stateful holders over the pure domain."""
