from .json_handler import FRAMINGS, JsonStreamDecoder

__all__ = ["FRAMINGS", "JsonStreamDecoder"]
