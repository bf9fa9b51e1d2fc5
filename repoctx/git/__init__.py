"""Version-control integration for checkpoints and change summaries."""
