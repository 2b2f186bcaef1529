"""AI-assisted workflow builder chat pipeline."""

__version__ = "0.1.0"
