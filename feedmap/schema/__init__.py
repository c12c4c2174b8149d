"""Feed and channel schema models."""

from .models import Record, SchemaEntry, ChannelField, FeedData
from .channels import ChannelRegistry, REGISTRY_VERSION

__all__ = [
    "Record",
    "SchemaEntry",
    "ChannelField",
    "FeedData",
    "ChannelRegistry",
    "REGISTRY_VERSION",
]
