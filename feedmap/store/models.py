"""Persisted shop, channel and comment records."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Comment:
    """A note on a shop, optionally scoped to one field."""

    id: str
    text: str
    timestamp: str
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "text": self.text,
            "timestamp": self.timestamp,
            "field": self.field,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=data["id"],
            text=data.get("text", ""),
            timestamp=data.get("timestamp", ""),
            field=data.get("field"),
        )


@dataclass
class Channel:
    """A channel attached to a shop."""

    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Channel":
        return cls(id=data["id"], name=data.get("name", ""))


@dataclass
class Shop:
    """A shop with its uploaded feed and saved mappings."""

    id: str
    name: str
    xml_content: Optional[str] = None
    product_count: int = 0
    comments: List[Comment] = field(default_factory=list)
    channels: List[Channel] = field(default_factory=list)
    mapped_channels: List[str] = field(default_factory=list)
    internal_mappings: List[Dict[str, Any]] = field(default_factory=list)
    channel_mappings: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    is_locked: bool = False

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        """Return channel by id."""
        for channel in self.channels:
            if channel.id == channel_id:
                return channel
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "xml_content": self.xml_content,
            "product_count": self.product_count,
            "comments": [c.to_dict() for c in self.comments],
            "channels": [c.to_dict() for c in self.channels],
            "mapped_channels": list(self.mapped_channels),
            "internal_mappings": list(self.internal_mappings),
            "channel_mappings": dict(self.channel_mappings),
            "is_locked": self.is_locked,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Shop":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            xml_content=data.get("xml_content"),
            product_count=data.get("product_count", 0),
            comments=[Comment.from_dict(c) for c in data.get("comments", [])],
            channels=[Channel.from_dict(c) for c in data.get("channels", [])],
            mapped_channels=list(data.get("mapped_channels", [])),
            internal_mappings=list(data.get("internal_mappings", [])),
            channel_mappings=dict(data.get("channel_mappings", {})),
            is_locked=bool(data.get("is_locked", False)),
        )


@dataclass
class StoreState:
    """Everything the store persists."""

    shops: List[Shop] = field(default_factory=list)

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        """Return shop by id."""
        for shop in self.shops:
            if shop.id == shop_id:
                return shop
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"shops": [s.to_dict() for s in self.shops]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoreState":
        return cls(shops=[Shop.from_dict(s) for s in data.get("shops", [])])
