"""
Data models for the HTTP request worker.
"""

from .delivery import Delivery
from .message import Disposition, MessageFields, RequestDescriptor

__all__ = [
    'Delivery',
    'Disposition',
    'MessageFields',
    'RequestDescriptor',
]
