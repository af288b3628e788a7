"""AI client management for the workout sheets API."""
from .client_factory import AIClientFactory

__all__ = [
    "AIClientFactory",
]
