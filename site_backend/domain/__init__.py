"""Domain models and their JSON (wire/storage) representation."""
