"""Core domain: exceptions and import rules."""
