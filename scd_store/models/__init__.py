"""Pydantic configuration models."""
