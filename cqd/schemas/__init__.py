from .catalog import PARSE_ERROR_MESSAGE, AppConfig, ProductAreaSummary, RegionTagSummary

__all__ = [
    "PARSE_ERROR_MESSAGE",
    "AppConfig",
    "ProductAreaSummary",
    "RegionTagSummary",
]
