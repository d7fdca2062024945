"""HTTP API for RoundRobin."""
