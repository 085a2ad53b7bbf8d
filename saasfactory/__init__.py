"""Interactive wizard that scaffolds SaaS projects, optionally enriched by an AI assistant."""

__version__ = "0.1.0"
