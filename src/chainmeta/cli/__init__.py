"""Command line entry points for the metadata tooling."""
