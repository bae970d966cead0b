"""Shared utilities for fwaudit."""
