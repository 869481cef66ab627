"""Configuration – table settings and their loaders."""
