"""Chi War CLI - Feng Shui 2 combat tooling."""

__version__ = "0.1.0"
