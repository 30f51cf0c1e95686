"""Application layer: use cases over the boundary layer."""
