"""Schema-driven endpoint contracts: one catalog, signed clients, wrapped handlers."""

__version__ = "0.1.0"
