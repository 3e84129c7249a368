"""Concrete collaborator clients and their selection."""
