"""Adapters implementing domain ports against external services."""
