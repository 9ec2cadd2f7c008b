"""Core module - errors, results, settings and logging."""
