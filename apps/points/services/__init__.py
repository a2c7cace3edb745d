"""
Points services module.
"""
from .points_service import PointsService

__all__ = [
    'PointsService',
]
