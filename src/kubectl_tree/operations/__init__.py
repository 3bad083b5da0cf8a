"""Relationship resolution and tree assembly."""
