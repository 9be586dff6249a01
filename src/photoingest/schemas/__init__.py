"""Pydantic schemas for photoingest input files."""

from photoingest.schemas.config import ConfigSchema, DngSchema

__all__ = ["ConfigSchema", "DngSchema"]
