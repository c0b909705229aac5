"""axegrid command-line interface."""
