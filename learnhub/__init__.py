"""LearnHub e-learning platform API."""

__version__ = "0.1.0"
