"""Declarative movement-plan reconciliation for a ground vehicle HTTP API."""
