"""Interactive availability maps for real-estate developments."""
