"""Clients and reconciliation against the hosted vault APIs."""
