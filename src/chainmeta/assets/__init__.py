"""Maintenance tools for the token and vault image asset tree."""
