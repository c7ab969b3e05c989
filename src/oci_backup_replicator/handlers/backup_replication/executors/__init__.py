"""Executors for resolved backup actions."""
