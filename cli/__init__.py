"""vgmswan command line interface."""
