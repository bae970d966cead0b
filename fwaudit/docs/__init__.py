"""Documentation indexing: sources, fetching, heuristics."""
