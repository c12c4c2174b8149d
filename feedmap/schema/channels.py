"""Static registry of target channel schemas."""
from typing import Dict, List, Optional, Tuple
from difflib import SequenceMatcher

from feedmap.schema.models import ChannelField

REGISTRY_VERSION = "1"


def _required(*names: str) -> List[ChannelField]:
    return [ChannelField(name) for name in names]


def _optional(*names: str) -> List[ChannelField]:
    return [ChannelField(name, optional=True) for name in names]


class ChannelRegistry:
    """Maps channel identifiers to their ordered output field lists."""

    DISPLAY_NAMES = {
        'facebook': 'Facebook Product Ads',
        'google': 'Google',
        'snapchat': 'Snapchat',
        'tiktok': 'TikTok',
    }

    SCHEMAS: Dict[str, List[ChannelField]] = {
        'facebook': _required(
            'id', 'title', 'description', 'availability', 'condition',
            'price', 'link', 'image_link', 'brand',
        ),
        'google': _required(
            'g_id', 'g_title', 'g_description', 'g_availability',
            'g_price', 'g_link', 'g_image_link',
        ),
        'snapchat': _required(
            'id', 'title', 'description', 'link', 'image_link',
            'availability', 'price',
        ) + _optional('brand_gtin_or_mpn'),
        'tiktok': _required(
            'sku_id', 'title', 'description', 'availability', 'condition',
            'price', 'link', 'image_link', 'brand', 'age_group',
        ) + _optional(
            'color', 'gender', 'gtin', 'mpn', 'size', 'material', 'pattern',
            'product_type', 'google_product_category', 'additional_image_link',
            'sale_price', 'sale_price_effective_date', 'item_group_id',
            'shipping', 'shipping_weight', 'tax',
            'custom_label_0', 'custom_label_1', 'custom_label_2',
            'custom_label_3', 'custom_label_4',
        ),
    }

    @staticmethod
    def get_schema(channel_id: str) -> Optional[List[ChannelField]]:
        """
        Get the ordered field list for a channel.

        Args:
            channel_id: Channel identifier (case-insensitive)

        Returns:
            List of ChannelField, or None if the channel is unknown
        """
        if not channel_id:
            return None

        schema = ChannelRegistry.SCHEMAS.get(channel_id.lower().strip())
        return list(schema) if schema is not None else None

    @staticmethod
    def get_display_name(channel_id: str) -> str:
        """Human readable channel name, falling back to the identifier."""
        return ChannelRegistry.DISPLAY_NAMES.get(channel_id.lower().strip(), channel_id)

    @staticmethod
    def get_all_channels() -> List[str]:
        """
        Get list of all supported channel identifiers.

        Returns:
            list: Channel identifiers in registry order
        """
        return list(ChannelRegistry.SCHEMAS)

    @staticmethod
    def required_fields(channel_id: str) -> List[str]:
        """Names of the non-optional fields of a channel."""
        schema = ChannelRegistry.get_schema(channel_id) or []
        return [f.name for f in schema if not f.optional]

    @staticmethod
    def suggest_channels(name: str, limit: int = 3) -> List[Tuple[str, str]]:
        """
        Suggest channel identifiers for a possibly misspelled name.

        Args:
            name: User-supplied channel name
            limit: Maximum number of suggestions

        Returns:
            list: List of (channel_id, confidence) tuples, sorted by confidence
        """
        if not name:
            return []

        name_lower = name.lower().strip()
        suggestions = []

        for channel_id, display_name in ChannelRegistry.DISPLAY_NAMES.items():
            similarity = max(
                SequenceMatcher(None, name_lower, channel_id).ratio(),
                SequenceMatcher(None, name_lower, display_name.lower()).ratio(),
            )
            if similarity >= 0.6:  # 60% threshold for suggestions
                suggestions.append((channel_id, similarity))

        suggestions.sort(key=lambda x: x[1], reverse=True)

        return [(channel_id, f"{score:.1%}") for channel_id, score in suggestions[:limit]]
