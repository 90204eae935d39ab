"""In-memory storage layer.

This module keeps records indexed by identifier and display name.
It also owns the JSON payload mapping shared by persistence flows.
"""
