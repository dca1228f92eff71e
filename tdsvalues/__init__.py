"""Encode and decode Microsoft SQL Server (TDS) values as Python objects."""

__version__ = "0.1.0"
__all__ = ["types", "value"]