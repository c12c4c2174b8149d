"""
Mapping Engine - applies a mapping set to a record set

Pure and deterministic: every call builds fresh output records from its
inputs and keeps no state, so it can be re-run freely for previews.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Union

from feedmap.engine.field_builder import FieldBuilder
from feedmap.errors import EngineComputeFailure, FeedMapError
from feedmap.mapper.mapping import Mapping, MappingSet
from feedmap.schema.models import ChannelField, Record

logger = logging.getLogger(__name__)

Mappings = Union[MappingSet, Iterable[Mapping]]


class MappingEngine:
    """
    Builds derived records from source records

    Usage:
    ```python
    engine = MappingEngine()
    mapped = engine.apply(records, MappingSet([
        Mapping("id", Rename("sku")),
        Mapping("title", Rename("name")),
    ]))
    ```
    """

    def __init__(self):
        self.field_builder = FieldBuilder()

    def apply_record(self, record: Record, mappings: Sequence[Mapping]) -> Record:
        """
        Build one output record

        Only mapped target fields appear in the result; source fields without
        a mapping are not passed through.
        """
        output: Record = {}

        for mapping in mappings:
            target, value = self.field_builder.build_field(mapping, record)

            if value is None:
                continue

            if not isinstance(value, str):
                raise EngineComputeFailure(
                    f"Non-text value for {target}: {type(value).__name__}"
                )

            output[target] = value

        return output

    def apply(
        self,
        records: Sequence[Record],
        mappings: Mappings,
        channel_fields: Optional[Sequence[ChannelField]] = None,
    ) -> List[Record]:
        """
        Apply mappings to every record

        Args:
            records: Source records in document order
            mappings: MappingSet, or mappings where later targets replace earlier ones
            channel_fields: If given, mappings for fields outside the channel are skipped

        Returns:
            Output records, same length and order as the input

        Raises:
            EngineComputeFailure: On an unexpected internal fault; no partial
            result is returned
        """
        if not isinstance(mappings, MappingSet):
            mappings = MappingSet(mappings)

        active = list(mappings)

        if channel_fields is not None:
            allowed = {f.name for f in channel_fields}
            skipped = [m.target_field for m in active if m.target_field not in allowed]
            if skipped:
                logger.debug(f"Skipping mappings outside channel schema: {skipped}")
            active = [m for m in active if m.target_field in allowed]

        try:
            output = [self.apply_record(record, active) for record in records]
        except FeedMapError:
            raise
        except Exception as e:
            logger.error(f"Error applying mappings: {e}")
            raise EngineComputeFailure(f"Failed to apply mappings: {e}") from e

        logger.info(f"Applied {len(active)} mappings to {len(output)} records")
        return output


def apply_mappings(
    records: Sequence[Record],
    mappings: Mappings,
    channel_fields: Optional[Sequence[ChannelField]] = None,
) -> List[Record]:
    """Apply a mapping set to a record set. See MappingEngine.apply."""
    return MappingEngine().apply(records, mappings, channel_fields)
