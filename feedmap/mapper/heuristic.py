"""Heuristic suggestions for mapping feed fields onto channel fields."""
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Dict, Iterable, List, Optional, Sequence, Union

from feedmap.mapper.mapping import Mapping, MappingSet, Rename
from feedmap.schema.models import ChannelField, SchemaEntry


@dataclass
class MappingSuggestion:
    """A proposed mapping with how confident the heuristic is in it."""

    mapping: Mapping
    confidence: float

    def to_dict(self) -> Dict:
        data = self.mapping.to_dict()
        data["confidence"] = round(self.confidence, 2)
        return data


def identity_mappings(field_names: Iterable[str]) -> MappingSet:
    """One Rename per field, mapping the field onto itself."""
    return MappingSet(Mapping(name, Rename(name)) for name in field_names)


class HeuristicMapper:
    """Suggest Rename mappings from source feed fields to channel fields."""

    # Channel field (prefix stripped) -> common source field names
    COMMON_FIELD_MAPPINGS = {
        "id": ["id", "sku", "product_id", "item_id", "code", "article_number"],
        "sku_id": ["sku", "id", "product_id", "item_id"],
        "title": ["title", "name", "product_name", "product_title"],
        "description": ["description", "desc", "long_description", "summary"],
        "availability": ["availability", "stock_status", "in_stock", "stock"],
        "condition": ["condition", "state"],
        "price": ["price", "sale_price", "regular_price", "amount"],
        "link": ["link", "url", "product_url", "deeplink"],
        "image_link": ["image_link", "image", "image_url", "picture", "img"],
        "brand": ["brand", "manufacturer", "vendor"],
        "gtin": ["gtin", "ean", "upc", "barcode"],
        "mpn": ["mpn", "manufacturer_part_number"],
        "color": ["color", "colour"],
    }

    CHANNEL_PREFIXES = ("g_", "s_", "t_", "g:")

    def suggest_mappings(
        self,
        source: Union[Sequence[SchemaEntry], Sequence[str]],
        channel_fields: Sequence[ChannelField],
    ) -> List[MappingSuggestion]:
        """
        Generate mapping suggestions for every channel field that has a match.

        Args:
            source: Source schema entries or plain field names
            channel_fields: Target channel schema

        Returns:
            List of suggestions in channel field order
        """
        source_names = [s.name if isinstance(s, SchemaEntry) else s for s in source]
        suggestions = []

        for channel_field in channel_fields:
            match = self._find_source_field(channel_field.name, source_names)
            if match is None:
                continue

            source_name, confidence = match
            suggestions.append(
                MappingSuggestion(
                    mapping=Mapping(channel_field.name, Rename(source_name)),
                    confidence=confidence,
                )
            )

        return suggestions

    def _strip_prefix(self, name: str) -> str:
        for prefix in self.CHANNEL_PREFIXES:
            if name.startswith(prefix):
                return name[len(prefix):]
        return name

    def _find_source_field(self, target: str, source_names: List[str]) -> Optional[tuple]:
        """Find matching source field and a confidence for it."""
        by_lower = {}
        for name in source_names:
            by_lower.setdefault(self._strip_prefix(name.lower()), name)

        target_lower = self._strip_prefix(target.lower())

        # Exact match
        if target_lower in by_lower:
            return by_lower[target_lower], 1.0

        # Common mapping
        for alias in self.COMMON_FIELD_MAPPINGS.get(target_lower, []):
            if alias in by_lower:
                return by_lower[alias], 0.9

        # Fuzzy match
        best_match = None
        best_ratio = 0.75

        for lower, name in by_lower.items():
            ratio = SequenceMatcher(None, target_lower, lower).ratio()

            if ratio > best_ratio:
                best_ratio = ratio
                best_match = name

        if best_match is None:
            return None

        return best_match, best_ratio * 0.8
