"""Boundary layer: database engines, ORM models and introspection."""
