"""Configuration and logging for AnnoDeck."""
