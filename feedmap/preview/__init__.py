"""Read-only previews of mapping results."""

from .identity import RecordKeys, infer_record_keys
from .projection import PreviewPage, PreviewRow, build_preview, paginate

__all__ = [
    "RecordKeys",
    "infer_record_keys",
    "PreviewPage",
    "PreviewRow",
    "build_preview",
    "paginate",
]
