"""Flask web frontend for restaurant order management."""
