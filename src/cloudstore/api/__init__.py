"""HTTP surface for the write path."""
