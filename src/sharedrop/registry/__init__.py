"""In-memory shared state registries."""
