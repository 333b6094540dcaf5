"""HTTP API for the recompute pass."""
