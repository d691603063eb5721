"""Operational scripts for Voya environments."""
