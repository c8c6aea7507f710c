"""Unit tests running against the in-memory fake driver."""
