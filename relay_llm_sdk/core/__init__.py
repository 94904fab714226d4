"""Core layer of the relay SDK (capabilities)."""
