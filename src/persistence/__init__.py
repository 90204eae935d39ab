"""Persistence lifecycle components.

This module saves and loads store files, runs periodic autosave,
and installs final-save hooks for shutdown and crashes.
"""
