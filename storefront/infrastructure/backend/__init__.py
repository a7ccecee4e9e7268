"""
Hosted database backend infrastructure.
"""

from .default_wilayas import default_wilayas
from .rest_client import RestBackend

__all__ = ["RestBackend", "default_wilayas"]
