"""Domain layer: workflow transition tables and repository protocols."""
