"""Sarawak news ingestion and refresh pipeline."""

__version__ = "0.1.0"
