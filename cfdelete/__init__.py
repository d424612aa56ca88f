"""Safely delete Cloudflare Workers and the resources they exclusively own."""

__version__ = "0.1.0"
