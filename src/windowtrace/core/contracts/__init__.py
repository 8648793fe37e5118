"""JSON export contracts."""
