"""Core infrastructure: configuration, paths, errors and theming."""
