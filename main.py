#!/usr/bin/env python3
"""feedmap - product feed channel mapper. Entry point."""
import json
import logging
import sys
from pathlib import Path

import click
from colorama import Fore, Style, init

from config import app_config
from feedmap import __version__
from feedmap.cli.interactive import InteractiveCLI, describe_mapping
from feedmap.engine import apply_mappings
from feedmap.errors import FeedMapError
from feedmap.exporter.json_exporter import JsonMappingExporter
from feedmap.exporter.xml_exporter import XmlExporter
from feedmap.mapper.heuristic import HeuristicMapper
from feedmap.mapper.mapping import MappingSet
from feedmap.parser.parser_factory import FeedParserFactory
from feedmap.preview import build_preview, paginate
from feedmap.schema.channels import ChannelRegistry
from feedmap.validator.mapping_validator import MappingValidator

# Initialize colorama
init(autoreset=True)

logger = logging.getLogger("feedmap")


def print_banner():
    """Print application banner."""
    print(f"{Fore.CYAN}{'=' * 44}")
    print(f"{Fore.CYAN}║   {Fore.WHITE}feedmap{Fore.CYAN}                              ║")
    print(f"{Fore.CYAN}║   {Fore.WHITE}Product Feed Channel Mapper{Fore.CYAN}          ║")
    print(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    print()


def fail(error: Exception):
    """Report an error to the user and exit non-zero."""
    click.echo(f"{Fore.RED}❌ {error}", err=True)
    sys.exit(1)


def resolve_channel(channel_id: str):
    """Channel schema for an id, or exit with suggestions."""
    schema = ChannelRegistry.get_schema(channel_id)
    if schema is None:
        suggestions = ChannelRegistry.suggest_channels(channel_id)
        hint = f" Did you mean: {', '.join(c for c, _ in suggestions)}?" if suggestions else ""
        fail(f"Unknown channel '{channel_id}'.{hint}")
    return schema


def load_mappings(path: str) -> MappingSet:
    return JsonMappingExporter().load(Path(path))


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """feedmap - map product feed fields onto ad channel formats."""
    level = logging.DEBUG if verbose else getattr(logging, app_config.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s - %(name)s - %(message)s")


@cli.command()
def channels():
    """List supported channels and their fields."""
    for channel_id in ChannelRegistry.get_all_channels():
        click.echo(f"{Fore.CYAN}{channel_id}{Style.RESET_ALL} ({ChannelRegistry.get_display_name(channel_id)})")
        for field in ChannelRegistry.get_schema(channel_id):
            marker = "optional" if field.optional else "required"
            click.echo(f"   • {field.name} [{marker}]")


@cli.command()
@click.argument("feed", type=click.Path(exists=True, dir_okay=False))
def inspect(feed):
    """Show the records and inferred schema of a feed."""
    try:
        data = FeedParserFactory.parse_file(feed)
    except (FeedMapError, ValueError) as e:
        fail(e)

    click.echo(f"{Fore.GREEN}✅ Parsed successfully!")
    click.echo(f"   Items: {len(data.records)}")
    click.echo(f"   Fields: {len(data.schema)}")

    for entry in data.schema:
        required = " (required)" if entry.required else ""
        help_text = f" - {entry.help_text}" if entry.help_text else ""
        click.echo(f"   • {entry.name}{required}{help_text}")


@cli.command()
@click.argument("feed", type=click.Path(exists=True, dir_okay=False))
@click.option("--channel", "channel_id", required=True, help="Target channel id")
@click.option("--output", type=click.Path(dir_okay=False), help="Write suggested mappings to this JSON file")
def suggest(feed, channel_id, output):
    """Suggest rename mappings from a feed to a channel."""
    schema = resolve_channel(channel_id)

    try:
        data = FeedParserFactory.parse_file(feed)
    except (FeedMapError, ValueError) as e:
        fail(e)

    suggestions = HeuristicMapper().suggest_mappings(data.schema, schema)

    for suggestion in suggestions:
        click.echo(
            f"{Fore.GREEN}✓ {suggestion.mapping.target_field}: "
            f"{describe_mapping(suggestion.mapping)} ({suggestion.confidence:.0%})"
        )

    unmatched = [f.name for f in schema if f.name not in {s.mapping.target_field for s in suggestions}]
    for name in unmatched:
        click.echo(f"{Fore.YELLOW}✗ {name}: no match")

    if output:
        mappings = MappingSet(s.mapping for s in suggestions)
        JsonMappingExporter().export(Path(output), mappings, channel_id=channel_id, source_file=feed)
        click.echo(f"{Fore.GREEN}Saved {len(mappings)} mappings to {output}")


@cli.command()
@click.argument("feed", type=click.Path(exists=True, dir_okay=False))
@click.option("--mappings", "mappings_file", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--channel", "channel_id", default=None, help="Constrain output to a channel schema")
@click.option("--shop", "shop_name", default="feed", show_default=True, help="Shop name used in the file name")
@click.option("--output-dir", default=None, type=click.Path(file_okay=False), help="Output directory")
def apply(feed, mappings_file, channel_id, shop_name, output_dir):
    """Apply mappings to a feed and write the resulting XML."""
    schema = resolve_channel(channel_id) if channel_id else None

    try:
        data = FeedParserFactory.parse_file(feed)
        mappings = load_mappings(mappings_file)
        records = apply_mappings(data.records, mappings, schema)
        output_file = XmlExporter().export(
            Path(output_dir or app_config.output_dir),
            shop_name,
            channel_id or "mapped",
            records,
            schema,
            data.namespaces,
        )
    except (FeedMapError, ValueError) as e:
        fail(e)

    click.echo(f"{Fore.GREEN}✅ Wrote {len(records)} items to {output_file}")


@cli.command()
@click.argument("feed", type=click.Path(exists=True, dir_okay=False))
@click.option("--mappings", "mappings_file", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--field", "target_field", required=True, help="Target field to preview")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--json", "as_json", is_flag=True, help="Print rows as JSON")
def preview(feed, mappings_file, target_field, page, as_json):
    """Preview original and mapped values for one field."""
    try:
        data = FeedParserFactory.parse_file(feed)
        rows = build_preview(data.records, load_mappings(mappings_file), target_field)
    except (FeedMapError, ValueError) as e:
        fail(e)

    current = paginate(rows, page)

    if as_json:
        click.echo(json.dumps([row.to_dict() for row in current.rows], indent=2))
        return

    click.echo(f"{Fore.CYAN}{target_field} - page {current.page} of {current.total_pages}")
    for row in current.rows:
        values = row.to_dict()
        click.echo(
            f"{values['record_id']:15s} {values['record_label'][:30]:30s} "
            f"{values['original_value'][:25]:25s} → {values['mapped_value']}"
        )


@cli.command()
@click.argument("feed", type=click.Path(exists=True, dir_okay=False))
@click.option("--mappings", "mappings_file", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--channel", "channel_id", required=True, help="Target channel id")
def validate(feed, mappings_file, channel_id):
    """Check mappings against a feed and a channel."""
    schema = resolve_channel(channel_id)

    try:
        data = FeedParserFactory.parse_file(feed)
        mappings = load_mappings(mappings_file)
    except (FeedMapError, ValueError) as e:
        fail(e)

    errors = MappingValidator().validate(mappings, data.field_names(), schema)

    click.echo(f"{Fore.GREEN}✅ Validation complete")
    click.echo(f"   Mappings: {len(mappings)}")
    click.echo(f"   Issues: {len(errors)}")

    for error in errors:
        click.echo(f"{Fore.YELLOW}   • {error}")

    if errors:
        sys.exit(1)


@cli.command()
def interactive():
    """Start the interactive shop workflow."""
    print_banner()
    InteractiveCLI().run()


if __name__ == "__main__":
    cli()
