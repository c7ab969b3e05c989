"""Common function utilities and base classes.

Provides foundational components for building function handlers including
the base handler class, invocation context models and logging.
"""
