"""Domain layer containing the demo's document models."""

from .models import Article

__all__ = ["Article"]
