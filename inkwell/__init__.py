"""Inkwell: a small multi-user blogging service."""
