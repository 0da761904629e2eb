"""Shared utilities for scratchmongo (I/O, processes, ports, logging)."""
