"""Configuration, logging and shared runtime helpers."""
