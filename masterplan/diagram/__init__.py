"""Interactive diagram overlay: parsing, region binding, labels and teardown."""
