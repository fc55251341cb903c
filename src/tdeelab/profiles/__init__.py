"""Patient body calculations."""
