"""Core infrastructure: configuration, errors, logging, ports and adapters."""
