"""Shared helpers used across lockwatch layers."""
