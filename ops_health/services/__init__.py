"""Configuration loading and status assembly."""
