"""Payee classification: Business vs. Individual."""

__version__ = "0.1.0"
