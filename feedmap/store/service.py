"""Operations on shops, their channels, comments and saved mappings."""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Union

from feedmap.errors import FeedMapError
from feedmap.mapper.mapping import MappingSet
from feedmap.parser.xml_parser import count_items, decode_document
from feedmap.schema.channels import ChannelRegistry
from feedmap.store.models import Channel, Comment, Shop, StoreState
from feedmap.store.repository import StateRepository

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Short lowercase hex identifier."""
    return uuid.uuid4().hex[:5]


class ShopNotFound(KeyError):
    """Raised when a shop id is not in the store."""


class ShopLocked(FeedMapError):
    """Raised when editing the feed or mappings of a locked shop."""


class ShopService:
    """Every mutation loads state, applies the change and saves it back."""

    def __init__(self, repository: StateRepository):
        self.repository = repository

    def _update(self, shop_id: str, change: Callable[[Shop], None], editing: bool = False) -> Shop:
        state = self.repository.load()
        shop = state.get_shop(shop_id)
        if shop is None:
            raise ShopNotFound(shop_id)
        if editing and shop.is_locked:
            raise ShopLocked(f"Shop {shop.name} is locked")
        change(shop)
        self.repository.save(state)
        return shop

    def list_shops(self) -> List[Shop]:
        return self.repository.load().shops

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        return self.repository.load().get_shop(shop_id)

    def add_shop(self, name: str, xml_content: Optional[str] = None) -> Shop:
        state = self.repository.load()
        shop = Shop(id=new_id(), name=name)
        if xml_content is not None:
            shop.xml_content = xml_content
            shop.product_count = count_items(xml_content)
        state.shops.append(shop)
        self.repository.save(state)
        logger.info(f"Added shop {shop.name} ({shop.id})")
        return shop

    def delete_shop(self, shop_id: str) -> None:
        state = self.repository.load()
        state.shops = [s for s in state.shops if s.id != shop_id]
        self.repository.save(state)

    def rename_shop(self, shop_id: str, new_name: str) -> Shop:
        def change(shop: Shop) -> None:
            shop.name = new_name

        return self._update(shop_id, change)

    def upload_feed(self, shop_id: str, xml_content: Union[str, bytes]) -> Shop:
        """
        Attach a feed to a shop.

        Raises:
            ParseError: If the feed is not well-formed; the shop is left as it was
            ShopLocked: If the shop is locked
        """
        if isinstance(xml_content, bytes):
            xml_content = decode_document(xml_content)

        product_count = count_items(xml_content)

        def change(shop: Shop) -> None:
            shop.xml_content = xml_content
            shop.product_count = product_count

        return self._update(shop_id, change, editing=True)

    def toggle_lock(self, shop_id: str) -> Shop:
        """Lock or unlock a shop. A locked shop's feed and mappings are read-only."""
        def change(shop: Shop) -> None:
            shop.is_locked = not shop.is_locked

        return self._update(shop_id, change)

    # Channels

    def add_channel(self, shop_id: str, channel_id: str, name: Optional[str] = None) -> Channel:
        """
        Attach a registry channel to a shop under a display name.

        Raises:
            ValueError: If the channel is unknown or already attached
        """
        if ChannelRegistry.get_schema(channel_id) is None:
            raise ValueError(f"Unknown channel: {channel_id}")

        channel_id = channel_id.lower().strip()
        channel = Channel(id=channel_id, name=name or ChannelRegistry.get_display_name(channel_id))

        def change(shop: Shop) -> None:
            if shop.get_channel(channel_id) is not None:
                raise ValueError(f"Channel {channel_id} is already attached to {shop.name}")
            shop.channels.append(channel)

        self._update(shop_id, change)
        return channel

    def delete_channel(self, shop_id: str, channel_id: str) -> Shop:
        """Detach a channel together with its saved mappings."""
        def change(shop: Shop) -> None:
            shop.channels = [c for c in shop.channels if c.id != channel_id]
            shop.channel_mappings.pop(channel_id, None)
            shop.mapped_channels = [c for c in shop.mapped_channels if c != channel_id]

        return self._update(shop_id, change, editing=True)

    def rename_channel(self, shop_id: str, channel_id: str, new_name: str) -> Shop:
        def change(shop: Shop) -> None:
            channel = shop.get_channel(channel_id)
            if channel is not None:
                channel.name = new_name

        return self._update(shop_id, change)

    # Comments

    def add_comment(self, shop_id: str, text: str, field: Optional[str] = None) -> Comment:
        """
        Add a general comment, or one scoped to ``field``.

        Raises:
            ValueError: If the text is blank
        """
        if not text or not text.strip():
            raise ValueError("Please enter a comment")

        comment = Comment(
            id=new_id(),
            text=text,
            timestamp=datetime.now(timezone.utc).isoformat(),
            field=field,
        )
        self._update(shop_id, lambda shop: shop.comments.append(comment))
        return comment

    def delete_comment(self, shop_id: str, comment_id: str) -> Shop:
        def change(shop: Shop) -> None:
            shop.comments = [c for c in shop.comments if c.id != comment_id]

        return self._update(shop_id, change)

    def comments_for(self, shop_id: str, field: Optional[str] = None) -> List[Comment]:
        """Comments on ``field``, or the general comments when field is None."""
        shop = self.get_shop(shop_id)
        if shop is None:
            raise ShopNotFound(shop_id)
        return [c for c in shop.comments if c.field == field]

    # Mappings

    def save_channel_mappings(self, shop_id: str, channel_id: str, mappings: MappingSet) -> Shop:
        """Persist a channel's mapping set and mark the channel as mapped."""
        def change(shop: Shop) -> None:
            shop.channel_mappings[channel_id] = mappings.to_list()
            if channel_id not in shop.mapped_channels:
                shop.mapped_channels.append(channel_id)

        return self._update(shop_id, change, editing=True)

    def load_channel_mappings(self, shop_id: str, channel_id: str) -> MappingSet:
        shop = self.get_shop(shop_id)
        if shop is None:
            raise ShopNotFound(shop_id)
        return MappingSet.from_list(shop.channel_mappings.get(channel_id, []))

    def save_internal_mappings(self, shop_id: str, mappings: MappingSet) -> Shop:
        def change(shop: Shop) -> None:
            shop.internal_mappings = mappings.to_list()

        return self._update(shop_id, change, editing=True)

    def load_internal_mappings(self, shop_id: str) -> MappingSet:
        shop = self.get_shop(shop_id)
        if shop is None:
            raise ShopNotFound(shop_id)
        return MappingSet.from_list(shop.internal_mappings)

    def clear(self) -> None:
        """Remove every shop."""
        self.repository.save(StoreState())
