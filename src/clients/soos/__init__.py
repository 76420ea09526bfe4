from .client import SoosApiClient

__all__ = ["SoosApiClient"]
