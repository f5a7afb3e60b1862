"""Ordering, change detection and migration of seeds into a store."""
