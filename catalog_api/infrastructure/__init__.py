"""Infrastructure layer: configuration, database wiring and logging."""
