"""Persistence for Deltalytix."""
