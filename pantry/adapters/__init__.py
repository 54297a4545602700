"""Adapters: rate limiting, HTTP dispatch, and Pantry client implementations."""
