"""Readwise provider: highlights, books and Reader documents."""
