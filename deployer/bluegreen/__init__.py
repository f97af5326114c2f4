"""Blue-green deployment orchestration for the weather front-end."""

__version__ = "0.1.0"
