"""Headless application layer for the Milan Fragancias back office."""
