"""Helpdesk: per-session agent controller with tools, memory and streamed replies."""

__version__ = "0.1.0"
