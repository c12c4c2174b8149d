"""Interactive CLI for the feed mapping workflow."""
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click
from colorama import Fore, Style

from config import app_config
from feedmap.cli.channel_selector import ChannelSelector
from feedmap.engine import apply_mappings
from feedmap.errors import FeedMapError, MappingError, ParseError
from feedmap.exporter.xml_exporter import XmlExporter
from feedmap.mapper.builder import MappingBuilder
from feedmap.mapper.heuristic import identity_mappings
from feedmap.mapper.mapping import Mapping, MappingSet, Operator
from feedmap.mapper.session import MappingSession
from feedmap.parser.xml_parser import XmlFeedParser
from feedmap.preview import build_preview, paginate
from feedmap.schema.channels import ChannelRegistry
from feedmap.schema.models import FeedData
from feedmap.store.models import Shop
from feedmap.store.repository import JsonFileRepository
from feedmap.store.service import ShopService
from feedmap.validator.mapping_validator import MappingValidator

logger = logging.getLogger(__name__)

MAPPING_TYPES = ["rename", "static", "combine", "empty", "skip", "remove"]

# File name suffix of the export built from the internal field mappings
INTERNAL_EXPORT = "internal"


def describe_mapping(mapping: Optional[Mapping]) -> str:
    """One-line summary of a mapping for menus."""
    if mapping is None:
        return "unmapped"

    data = mapping.to_dict()
    if data["type"] == "rename":
        text = f"rename ← {data['source_field']}"
    elif data["type"] == "static":
        text = f"static \"{data['value']}\""
    elif data["type"] == "combine":
        text = f"combine {' + '.join(data['fields'])} (sep {data['separator']!r})"
    else:
        text = "empty"

    if data["condition"] == "only_if":
        operator = Operator.parse(data["only_if_operator"]).label
        text += f" only if {data['only_if_field']} {operator} \"{data['only_if_value']}\""
    return text


def resolve_feed_path(name: str) -> Path:
    """Feed path as given, or relative to the feeds directory if only found there."""
    path = Path(name.strip())
    if not path.exists() and not path.is_absolute():
        candidate = Path(app_config.feeds_dir) / path
        if candidate.exists():
            return candidate
    return path


def channel_selector_for(shop: Shop) -> ChannelSelector:
    """Offer the shop's own channels, or every registry channel if it has none."""
    if shop.channels:
        return ChannelSelector(
            [c.id for c in shop.channels],
            {c.id: c.name for c in shop.channels},
        )
    return ChannelSelector()


class InteractiveCLI:
    """Interactive CLI interface."""

    def __init__(self, service: Optional[ShopService] = None):
        """Initialize CLI."""
        self.service = service or ShopService(JsonFileRepository(Path(app_config.store_file)))
        self.parser = XmlFeedParser()
        self.exporter = XmlExporter()
        self.current_shop_id: Optional[str] = None

    def print_header(self, title: str):
        """Print a section header."""
        print(f"\n{Fore.CYAN}{'━' * 45}")
        print(f"{Fore.CYAN}{title}")
        print(f"{Fore.CYAN}{'━' * 45}{Style.RESET_ALL}\n")

    def run(self):
        """Run interactive CLI."""
        while True:
            self.print_header("Main Menu")
            click.echo("1. Select Shop")
            click.echo("2. Create Shop")
            click.echo("3. Delete All Shops")
            click.echo("4. Exit\n")

            choice = click.prompt("Choose", type=int, default=1)

            try:
                if choice == 1:
                    shop = self.select_shop()
                    if shop:
                        self.shop_menu(shop.id)
                elif choice == 2:
                    self.create_shop()
                elif choice == 3:
                    self.clear_shops()
                elif choice == 4:
                    click.echo(f"{Fore.YELLOW}Goodbye!")
                    break
                else:
                    click.echo(f"{Fore.RED}Invalid choice")
            except FeedMapError as e:
                click.echo(f"{Fore.RED}❌ {e}")

    def select_shop(self) -> Optional[Shop]:
        """Pick a shop from the store."""
        self.print_header("Shops")
        shops = self.service.list_shops()

        if not shops:
            click.echo(f"{Fore.YELLOW}No shops yet. Create one first.")
            return None

        for i, shop in enumerate(shops, 1):
            feed = f"{shop.product_count} products" if shop.xml_content else "no feed"
            lock = " 🔒" if shop.is_locked else ""
            click.echo(f"{i}. {shop.name} [{shop.id}] ({feed}){lock}")

        choice = click.prompt("Select shop", type=int, default=1)
        if 1 <= choice <= len(shops):
            return shops[choice - 1]

        click.echo(f"{Fore.RED}Invalid choice")
        return None

    def create_shop(self):
        """Create a new shop, optionally with a feed."""
        self.print_header("Create Shop")
        name = click.prompt("Shop name", type=str).strip()
        if not name:
            click.echo(f"{Fore.RED}Shop name cannot be empty")
            return

        shop = self.service.add_shop(name)
        click.echo(f"{Fore.GREEN}✅ Created shop {shop.name} [{shop.id}]")

        if click.confirm("Upload a feed now?", default=True):
            self.upload_feed(shop.id)

    def clear_shops(self):
        """Remove every shop after confirmation."""
        if click.confirm("Delete ALL shops? This cannot be undone", default=False):
            self.service.clear()
            click.echo(f"{Fore.GREEN}✅ All shops deleted")

    def shop_menu(self, shop_id: str):
        """Per-shop actions."""
        self.current_shop_id = shop_id

        while True:
            shop = self.service.get_shop(shop_id)
            if shop is None:
                return

            lock = f" {Fore.YELLOW}(locked){Fore.CYAN}" if shop.is_locked else ""
            self.print_header(f"Shop: {shop.name}{lock}")
            mapped = ", ".join(shop.mapped_channels) or "none"
            click.echo(f"Products: {shop.product_count}   Mapped channels: {mapped}\n")
            click.echo(" 1. Upload Feed")
            click.echo(" 2. Map Internal Fields")
            click.echo(" 3. Export Internal XML")
            click.echo(" 4. Map Channel Fields")
            click.echo(" 5. Preview Channel Field")
            click.echo(" 6. Export Channel XML")
            click.echo(" 7. Manage Channels")
            click.echo(" 8. Comments")
            click.echo(" 9. Rename Shop")
            click.echo(f"10. {'Unlock' if shop.is_locked else 'Lock'} Shop")
            click.echo("11. Delete Shop")
            click.echo("12. Back\n")

            choice = click.prompt("Choose", type=int, default=4)

            try:
                if choice == 1:
                    self.upload_feed(shop_id)
                elif choice == 2:
                    self.map_internal(shop_id)
                elif choice == 3:
                    self.export_internal(shop_id)
                elif choice == 4:
                    self.map_channel(shop_id)
                elif choice == 5:
                    self.preview_field(shop_id)
                elif choice == 6:
                    self.export_channel(shop_id)
                elif choice == 7:
                    self.manage_channels(shop_id)
                elif choice == 8:
                    self.comments(shop_id)
                elif choice == 9:
                    self.rename_shop(shop_id)
                elif choice == 10:
                    self.toggle_lock(shop_id)
                elif choice == 11:
                    if self.delete_shop(shop_id):
                        break
                elif choice == 12:
                    break
                else:
                    click.echo(f"{Fore.RED}Invalid choice")
            except (FeedMapError, ValueError) as e:
                click.echo(f"{Fore.RED}❌ {e}")

    def _check_unlocked(self, shop_id: str) -> bool:
        shop = self.service.get_shop(shop_id)
        if shop is not None and shop.is_locked:
            click.echo(f"{Fore.YELLOW}Shop is locked. Unlock it to make changes.")
            return False
        return True

    def upload_feed(self, shop_id: str):
        """Attach a feed file to a shop."""
        if not self._check_unlocked(shop_id):
            return

        path = resolve_feed_path(click.prompt("Feed file", type=str))

        try:
            content = path.read_bytes()
        except OSError as e:
            click.echo(f"{Fore.RED}❌ Cannot read {path}: {e}")
            return

        try:
            shop = self.service.upload_feed(shop_id, content)
        except ParseError as e:
            logger.debug(f"Upload rejected: {e.detail}")
            click.echo(f"{Fore.RED}❌ {e}. The previous feed is unchanged.")
            return

        click.echo(f"{Fore.GREEN}✅ Feed uploaded: {shop.product_count} products")

    def _load_feed(self, shop_id: str) -> Optional[FeedData]:
        shop = self.service.get_shop(shop_id)
        if shop is None or not shop.xml_content:
            click.echo(f"{Fore.YELLOW}Upload a feed first")
            return None
        return self.parser.parse(shop.xml_content)

    def _edit_mappings(
        self,
        session: MappingSession,
        fields: Sequence[Tuple[str, bool]],
        source_fields: List[str],
    ):
        """Walk target fields, given as (name, required), editing the session draft."""
        for name, required in fields:
            label = name + (" *" if required else "")
            current = session.draft.get(name)
            click.echo(f"{Fore.YELLOW}{label}{Style.RESET_ALL}: {describe_mapping(current)}")

            try:
                mapping = self._prompt_mapping(name, source_fields)
            except MappingError as e:
                click.echo(f"{Fore.RED}Invalid mapping: {e}")
                continue

            if mapping == "remove":
                session.remove_mapping(name)
            elif mapping is not None:
                session.set_mapping(mapping)

    def _confirm_save(self, session: MappingSession, issues: List[str]) -> Optional[MappingSet]:
        """Show issues, then return the saved snapshot, or None if nothing is saved."""
        for issue in issues[:5]:
            click.echo(f"{Fore.YELLOW}   • {issue}")

        if not session.has_unsaved_changes:
            click.echo(f"{Fore.GREEN}No changes")
            return None

        if click.confirm("Save mappings?", default=True):
            return session.save()

        session.discard()
        click.echo(f"{Fore.YELLOW}Changes discarded")
        return None

    def map_internal(self, shop_id: str):
        """Edit the mappings of the feed's own fields, then save or discard."""
        if not self._check_unlocked(shop_id):
            return

        feed = self._load_feed(shop_id)
        if feed is None:
            return

        source_fields = feed.field_names()
        session = MappingSession(self.service.load_internal_mappings(shop_id))
        if not len(session.draft):
            for mapping in identity_mappings(source_fields):
                session.set_mapping(mapping)

        self.print_header("Map Internal Fields")

        fields = []
        for name in source_fields:
            entry = feed.get_entry(name)
            fields.append((name, bool(entry and entry.required)))
        self._edit_mappings(session, fields, source_fields)

        saved = self._confirm_save(session, MappingValidator().validate(session.draft, source_fields))
        if saved is not None:
            self.service.save_internal_mappings(shop_id, saved)
            click.echo(f"{Fore.GREEN}✅ Internal mappings saved")

    def export_internal(self, shop_id: str):
        """Apply the internal mappings to the whole feed and write the XML."""
        feed = self._load_feed(shop_id)
        if feed is None:
            return

        shop = self.service.get_shop(shop_id)
        mappings = self.service.load_internal_mappings(shop_id)
        if not len(mappings):
            mappings = identity_mappings(feed.field_names())

        records = apply_mappings(feed.records, mappings)
        output_file = self.exporter.export(
            Path(app_config.output_dir), shop.name, INTERNAL_EXPORT, records, None, feed.namespaces
        )
        click.echo(f"{Fore.GREEN}✅ Exported {len(records)} items to {output_file}")

    def map_channel(self, shop_id: str):
        """Edit a channel's mappings field by field, then save or discard."""
        if not self._check_unlocked(shop_id):
            return

        feed = self._load_feed(shop_id)
        if feed is None:
            return

        selector = channel_selector_for(self.service.get_shop(shop_id))
        channel_id = selector.prompt_selection()
        if not channel_id:
            return

        channel_fields = ChannelRegistry.get_schema(channel_id)
        session = MappingSession(self.service.load_channel_mappings(shop_id, channel_id))
        source_fields = feed.field_names()

        self.print_header(f"Map {selector.display_name(channel_id)}")
        click.echo(f"Source fields: {', '.join(source_fields)}\n")

        self._edit_mappings(session, [(f.name, f.required) for f in channel_fields], source_fields)

        issues = MappingValidator().validate(session.draft, source_fields, channel_fields)
        saved = self._confirm_save(session, issues)
        if saved is not None:
            self.service.save_channel_mappings(shop_id, channel_id, saved)
            click.echo(f"{Fore.GREEN}✅ Mappings saved")

    def _prompt_mapping(self, target_field: str, source_fields: List[str]):
        """Ask how to derive one field. Returns a Mapping, "remove" or None."""
        kind = click.prompt(
            "  Type",
            type=click.Choice(MAPPING_TYPES),
            default="skip",
        )

        if kind == "skip":
            return None
        if kind == "remove":
            return "remove"

        builder = MappingBuilder(target_field, default_separator=app_config.default_separator)

        if kind == "rename":
            builder.rename(click.prompt("  Source field", type=click.Choice(source_fields)))
        elif kind == "static":
            builder.static(click.prompt("  Value", default="", type=str))
        elif kind == "combine":
            fields = click.prompt("  Fields (comma-separated)", type=str)
            builder.combine([f.strip() for f in fields.split(",") if f.strip()])
            builder.set_separator(click.prompt("  Separator", default=builder.separator, type=str))
        else:
            builder.empty()

        if click.confirm("  Only for some records?", default=False):
            builder.only_if(
                click.prompt("  Condition field", type=click.Choice(source_fields)),
                click.prompt(
                    "  Operator",
                    type=click.Choice([op.label for op in Operator]),
                    default=Operator.EQUAL_TO.label,
                ),
                click.prompt("  Value", default="", type=str),
            )

        return builder.build()

    def preview_field(self, shop_id: str):
        """Show original and mapped values of one field, page by page."""
        feed = self._load_feed(shop_id)
        if feed is None:
            return

        channel_id = channel_selector_for(self.service.get_shop(shop_id)).prompt_selection()
        if not channel_id:
            return

        mappings = self.service.load_channel_mappings(shop_id, channel_id)
        target_field = click.prompt(
            "Field",
            type=click.Choice([f.name for f in ChannelRegistry.get_schema(channel_id)]),
        )
        rows = build_preview(feed.records, mappings, target_field)

        page = 1
        while True:
            current = paginate(rows, page)
            self.print_header(f"Preview: {target_field} (page {current.page} of {current.total_pages})")
            for row in current.rows:
                data = row.to_dict()
                click.echo(
                    f"{data['record_id']:15s} {data['record_label'][:30]:30s} "
                    f"{data['original_value'][:25]:25s} → {data['mapped_value']}"
                )

            if current.page >= current.total_pages or not click.confirm("Next page?", default=True):
                break
            page += 1

    def export_channel(self, shop_id: str):
        """Write the channel XML to the output directory."""
        feed = self._load_feed(shop_id)
        if feed is None:
            return

        shop = self.service.get_shop(shop_id)
        channel_id = channel_selector_for(shop).prompt_selection()
        if not channel_id:
            return

        schema = ChannelRegistry.get_schema(channel_id)
        mappings = self.service.load_channel_mappings(shop_id, channel_id)

        if not len(mappings):
            click.echo(f"{Fore.YELLOW}No saved mappings for {channel_id}")
            return

        records = apply_mappings(feed.records, mappings, schema)
        output_file = self.exporter.export(
            Path(app_config.output_dir), shop.name, channel_id, records, schema, feed.namespaces
        )
        click.echo(f"{Fore.GREEN}✅ Exported {len(records)} items to {output_file}")

    def manage_channels(self, shop_id: str):
        """Attach, rename and detach the shop's channels."""
        while True:
            shop = self.service.get_shop(shop_id)
            self.print_header(f"Channels: {shop.name}")

            if not shop.channels:
                click.echo(f"{Fore.YELLOW}No channels attached; every channel is offered.\n")
            for i, channel in enumerate(shop.channels, 1):
                mapped = f" {Fore.GREEN}✓ mapped" if channel.id in shop.mapped_channels else ""
                click.echo(f"{i}. {channel.name} [{channel.id}]{mapped}")

            click.echo("\n1. Add Channel")
            click.echo("2. Rename Channel")
            click.echo("3. Remove Channel")
            click.echo("4. Back\n")

            choice = click.prompt("Choose", type=int, default=4)

            if choice == 1:
                attached = {c.id for c in shop.channels}
                available = [c for c in ChannelRegistry.get_all_channels() if c not in attached]
                channel_id = ChannelSelector(available).prompt_selection()
                if channel_id:
                    name = click.prompt(
                        "Channel name", default=ChannelRegistry.get_display_name(channel_id), type=str
                    )
                    self.service.add_channel(shop_id, channel_id, name.strip() or None)
                    click.echo(f"{Fore.GREEN}✅ Channel added")
            elif choice in (2, 3):
                channel_id = channel_selector_for(shop).prompt_selection() if shop.channels else None
                if not channel_id:
                    continue
                if choice == 2:
                    name = click.prompt("New name", type=str).strip()
                    if name:
                        self.service.rename_channel(shop_id, channel_id, name)
                        click.echo(f"{Fore.GREEN}✅ Channel renamed")
                elif click.confirm("Remove the channel and its saved mappings?", default=False):
                    self.service.delete_channel(shop_id, channel_id)
                    click.echo(f"{Fore.GREEN}✅ Channel removed")
            elif choice == 4:
                break
            else:
                click.echo(f"{Fore.RED}Invalid choice")

    def comments(self, shop_id: str):
        """List, add and delete shop comments."""
        self.print_header("Comments")
        field = click.prompt("Field (ENTER for general comments)", default="", type=str).strip() or None

        existing = self.service.comments_for(shop_id, field)
        for i, comment in enumerate(existing, 1):
            click.echo(f"{i}. {comment.text}  {Fore.CYAN}{comment.timestamp}")

        text = click.prompt("New comment (ENTER to skip)", default="", type=str)
        if text.strip():
            self.service.add_comment(shop_id, text, field)
            click.echo(f"{Fore.GREEN}✅ Comment added")

        if existing:
            number = click.prompt("Delete comment # (0 to keep all)", default=0, type=int)
            if 1 <= number <= len(existing):
                self.service.delete_comment(shop_id, existing[number - 1].id)
                click.echo(f"{Fore.GREEN}✅ Comment deleted")

    def rename_shop(self, shop_id: str):
        name = click.prompt("New shop name", type=str).strip()
        if not name:
            click.echo(f"{Fore.RED}Shop name cannot be empty")
            return
        self.service.rename_shop(shop_id, name)
        click.echo(f"{Fore.GREEN}✅ Shop renamed")

    def toggle_lock(self, shop_id: str):
        shop = self.service.toggle_lock(shop_id)
        state = "locked" if shop.is_locked else "unlocked"
        click.echo(f"{Fore.GREEN}✅ Shop {state}")

    def delete_shop(self, shop_id: str) -> bool:
        """Delete a shop after confirmation. Returns True if it was deleted."""
        shop = self.service.get_shop(shop_id)
        if not click.confirm(f"Delete shop {shop.name}?", default=False):
            return False
        self.service.delete_shop(shop_id)
        self.current_shop_id = None
        click.echo(f"{Fore.GREEN}✅ Shop deleted")
        return True
