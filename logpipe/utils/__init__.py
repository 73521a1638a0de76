"""Utilities for logpipe."""
