"""Live in-game hedge decision support for player prop picks."""

__version__ = "1.0.0"
