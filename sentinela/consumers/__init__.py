"""Background consumers."""
