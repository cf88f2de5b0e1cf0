"""Validation for plan files."""
