"""scratchmongo core: configuration, binary resolution and server lifecycle."""
