"""Persistence for user watchlists."""
