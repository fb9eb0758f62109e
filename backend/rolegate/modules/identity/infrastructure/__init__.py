"""Identity infrastructure: SQL store, mapping and the identity-backed services."""
