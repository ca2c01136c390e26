"""Domain models, enums and the region catalog."""
