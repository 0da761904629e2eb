"""Top-level scratchmongo commands."""
