from .adapter import Player2Adapter

__all__ = ["Player2Adapter"]
