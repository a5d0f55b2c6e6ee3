"""Parsing, interview and scheduling services."""
