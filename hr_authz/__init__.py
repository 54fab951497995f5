"""HR authorization core with FastAPI gating adapters."""

__version__ = "0.1.0"
