"""Core modules for the TCOF plan record engine."""
