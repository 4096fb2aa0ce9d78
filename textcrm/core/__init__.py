"""Core infrastructure: exceptions, logging, validation, paths, config."""
