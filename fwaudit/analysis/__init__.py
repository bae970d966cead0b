"""Framework-aware structural analysis of source files."""
