"""Leadpage Engine - landing page builder and lead capture CRM."""

__version__ = "1.0.0"
