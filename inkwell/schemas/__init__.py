"""Pydantic schemas for request identity and JSON read endpoints."""
