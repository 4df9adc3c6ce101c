"""Pure domain types for the works kernel. Zero I/O."""
