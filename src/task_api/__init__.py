"""Task tracking HTTP API backed by a single-table key-value store."""
