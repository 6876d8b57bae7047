"""TEO command line interface."""
