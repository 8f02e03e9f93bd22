"""Weather data clients module."""

from src.weather.isd_lite import ISDLiteClient, parse_isd_lite

__all__ = [
    "ISDLiteClient",
    "parse_isd_lite",
]
