"""Run-time services: operation budget and the stale processor."""
