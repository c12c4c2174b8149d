"""Interactive channel selection from the channel registry."""
from typing import Dict, List, Optional

import click
from colorama import Fore

from feedmap.schema.channels import ChannelRegistry


class ChannelSelector:
    """Interactive selection of a target channel."""

    def __init__(self, channels: Optional[List[str]] = None, names: Optional[Dict[str, str]] = None):
        """
        Initialize selector.

        Args:
            channels: Channel ids to offer, default every registry channel
            names: Display names overriding the registry's, by channel id
        """
        self.channels = channels if channels is not None else ChannelRegistry.get_all_channels()
        self.names = names or {}
        self.selected: Optional[str] = None

    def display_name(self, channel_id: str) -> str:
        return self.names.get(channel_id) or ChannelRegistry.get_display_name(channel_id)

    def parse_selection(self, selection: str) -> Optional[str]:
        """
        Resolve user input to a channel id.

        Accepts a 1-based number or a channel id/name.

        Returns:
            Channel id, or None if the input matches nothing
        """
        selection = selection.strip()
        if not selection:
            return None

        if selection.isdigit():
            index = int(selection) - 1
            if 0 <= index < len(self.channels):
                return self.channels[index]
            return None

        lowered = selection.lower()
        for channel_id in self.channels:
            if lowered in (channel_id, self.display_name(channel_id).lower()):
                return channel_id

        return None

    def prompt_selection(self) -> Optional[str]:
        """
        Prompt user to select a channel.

        Returns:
            Selected channel id, or None if skipped
        """
        if not self.channels:
            click.echo(f"{Fore.YELLOW}No channels available")
            return None

        click.echo(f"\n{Fore.CYAN}Select a channel:")
        click.echo(f"{Fore.CYAN}{'=' * 60}\n")

        for i, channel_id in enumerate(self.channels, 1):
            schema = ChannelRegistry.get_schema(channel_id) or []
            required = sum(1 for f in schema if not f.optional)
            name = self.display_name(channel_id)
            click.echo(f"{i:2d}. {name:30s} ({len(schema)} fields, {required} required)")

        click.echo(f"\n{Fore.YELLOW}Or press ENTER to skip this step\n")

        while True:
            selection = click.prompt("Select channel", default="", type=str).strip()

            if not selection:
                click.echo(f"{Fore.YELLOW}No channel selected")
                return None

            channel_id = self.parse_selection(selection)
            if channel_id:
                self.selected = channel_id
                click.echo(f"{Fore.GREEN}✅ Selected {self.display_name(channel_id)}")
                return channel_id

            suggestions = [s for s in ChannelRegistry.suggest_channels(selection) if s[0] in self.channels]
            if suggestions:
                hint = ", ".join(channel_id for channel_id, _ in suggestions)
                click.echo(f"{Fore.RED}Unknown channel. Did you mean: {hint}?")
            else:
                click.echo(f"{Fore.RED}Invalid input. Enter a number or a channel name.")
