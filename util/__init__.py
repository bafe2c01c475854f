"""Utilities for the explorer: directory listing and command handling."""
