"""Bundled JSON Schemas for gate configuration and reports."""
