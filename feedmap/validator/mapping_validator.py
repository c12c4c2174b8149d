"""Mapping validation."""
from typing import List, Optional, Sequence

from feedmap.mapper.mapping import MappingSet
from feedmap.schema.models import ChannelField


class MappingValidator:
    """Validates a mapping set against a feed and a channel schema."""

    def validate(
        self,
        mappings: MappingSet,
        source_fields: Sequence[str],
        channel_fields: Optional[Sequence[ChannelField]] = None,
    ) -> List[str]:
        """Return a list of human-readable issues; empty when none."""
        errors = []
        known_sources = set(source_fields)

        # Check for unmapped required channel fields
        if channel_fields is not None:
            for channel_field in channel_fields:
                if not channel_field.optional and channel_field.name not in mappings:
                    errors.append(f"Missing mapping for required field {channel_field.name}")

            channel_names = {f.name for f in channel_fields}
            for mapping in mappings:
                if mapping.target_field not in channel_names:
                    errors.append(f"Mapping target {mapping.target_field} is not a channel field")

        # Check for references to fields the feed does not have
        for mapping in mappings:
            for source in mapping.source_fields():
                if source not in known_sources:
                    errors.append(
                        f"Unknown source field: {mapping.target_field} uses {source}"
                    )

        return errors
