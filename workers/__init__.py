"""
PHOTO ALIGN - Workers Module

Background workers for operations that should not block a UI thread.
"""

from workers.skew_worker import SkewDetectionWorker, SkewDetectionService

__all__ = [
    'SkewDetectionWorker',
    'SkewDetectionService',
]
