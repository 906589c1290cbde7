"""Core services shared by every sfvforge module: logging, errors, config."""
