"""Domain layer: field schemas and document mapping."""
