"""Persistence, normalization and record editing."""
