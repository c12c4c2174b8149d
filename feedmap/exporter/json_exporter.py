"""JSON import/export of mapping sets."""
import json
from pathlib import Path
from datetime import datetime
from typing import Optional

from feedmap.errors import MappingError
from feedmap.mapper.mapping import MappingSet


class JsonMappingExporter:
    """Export mapping sets to JSON and load them back."""

    def export(
        self,
        output_file: Path,
        mappings: MappingSet,
        channel_id: Optional[str] = None,
        source_file: Optional[str] = None,
    ) -> None:
        """Export to JSON file."""
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "metadata": {
                "created_at": datetime.now().isoformat(),
                "channel": channel_id,
                "source_file": source_file,
                "total_mappings": len(mappings),
            },
            "mappings": mappings.to_list(),
        }

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)

    def load(self, input_file: Path) -> MappingSet:
        """
        Load a mapping set written by export(), or a bare list of mappings.

        Raises:
            MappingError: If the file is unreadable or describes invalid mappings
        """
        try:
            with open(input_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise MappingError(f"Cannot read mapping file {input_file}: {e}") from e

        if isinstance(data, dict):
            data = data.get("mappings", [])

        if not isinstance(data, list):
            raise MappingError(f"Mapping file {input_file} must contain a list of mappings")

        return MappingSet.from_list(data)
