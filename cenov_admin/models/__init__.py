"""Request and response contracts."""
