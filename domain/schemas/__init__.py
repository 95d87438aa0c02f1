"""Pydantic request schemas, one module per resource area."""
