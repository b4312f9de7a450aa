"""Typed return values of the service layer."""
