"""Shared types, interfaces and exceptions."""
