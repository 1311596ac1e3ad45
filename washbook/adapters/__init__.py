"""
Adapters layer - Data access for working hours and reservation history.
"""

from .json_data_source import JsonFileDataSource
from .rest_client import RestDataClient

__all__ = ["JsonFileDataSource", "RestDataClient"]
