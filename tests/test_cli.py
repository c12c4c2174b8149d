"""Tests for the command line interface."""
import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner
import lxml.etree as ET

from config import AppConfig, app_config
from feedmap.cli.channel_selector import ChannelSelector
from feedmap.cli.interactive import (
    InteractiveCLI,
    channel_selector_for,
    describe_mapping,
    resolve_feed_path,
)
from feedmap.mapper.mapping import Combine, Mapping, MappingSet, OnlyIf, Operator, Rename, Static
from feedmap.schema.channels import ChannelRegistry
from feedmap.store.repository import InMemoryRepository
from feedmap.store.service import ShopService
from main import cli

FEED = (
    "<items>"
    "<item><sku>1</sku><name>Shoe</name><color>red</color></item>"
    "<item><sku>2</sku><name>Hat &amp; Scarf</name></item>"
    "</items>"
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def feed_file(tmp_path):
    path = tmp_path / "shop.xml"
    path.write_text(FEED, encoding="utf-8")
    return path


@pytest.fixture
def mappings_file(tmp_path):
    path = tmp_path / "mappings.json"
    path.write_text(json.dumps([
        {"target_field": "id", "type": "rename", "source_field": "sku"},
        {"target_field": "title", "type": "rename", "source_field": "name"},
    ]))
    return path


class TestCommands:
    """Test the click commands."""

    def test_channels(self, runner):
        result = runner.invoke(cli, ["channels"])

        assert result.exit_code == 0
        assert "facebook" in result.output
        assert "brand_gtin_or_mpn [optional]" in result.output

    def test_inspect(self, runner, feed_file):
        result = runner.invoke(cli, ["inspect", str(feed_file)])

        assert result.exit_code == 0
        assert "Items: 2" in result.output
        assert "Fields: 3" in result.output

    def test_inspect_malformed(self, runner, tmp_path):
        path = tmp_path / "bad.xml"
        path.write_text("<items><item>")

        result = runner.invoke(cli, ["inspect", str(path)])
        assert result.exit_code == 1

    def test_suggest_writes_mappings(self, runner, feed_file, tmp_path):
        output = tmp_path / "suggested.json"
        result = runner.invoke(cli, ["suggest", str(feed_file), "--channel", "facebook", "--output", str(output)])

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["metadata"]["channel"] == "facebook"
        assert {"target_field": "id", "type": "rename", "source_field": "sku", "condition": "all"} in data["mappings"]

    def test_unknown_channel(self, runner, feed_file):
        result = runner.invoke(cli, ["suggest", str(feed_file), "--channel", "facebok"])
        assert result.exit_code == 1

    def test_apply(self, runner, feed_file, mappings_file, tmp_path):
        out_dir = tmp_path / "out"
        result = runner.invoke(cli, [
            "apply", str(feed_file),
            "--mappings", str(mappings_file),
            "--shop", "demo",
            "--output-dir", str(out_dir),
        ])

        assert result.exit_code == 0
        assert "Wrote 2 items" in result.output
        assert (out_dir / "demo-mapped.xml").read_text(encoding="utf-8") == (
            "<items>"
            "<item><id>1</id><title>Shoe</title></item>"
            "<item><id>2</id><title>Hat &amp; Scarf</title></item>"
            "</items>"
        )

    def test_apply_rejects_invalid_target(self, runner, feed_file, tmp_path):
        """A mapping file with an unusable element name writes nothing."""
        mappings = tmp_path / "bad.json"
        mappings.write_text(json.dumps([
            {"target_field": "price (EUR)", "type": "rename", "source_field": "sku"},
        ]))
        out_dir = tmp_path / "out"

        result = runner.invoke(cli, [
            "apply", str(feed_file),
            "--mappings", str(mappings),
            "--output-dir", str(out_dir),
        ])

        assert result.exit_code == 1
        assert not (out_dir / "feed-mapped.xml").exists()

    def test_apply_with_channel(self, runner, feed_file, mappings_file, tmp_path):
        result = runner.invoke(cli, [
            "apply", str(feed_file),
            "--mappings", str(mappings_file),
            "--channel", "snapchat",
            "--output-dir", str(tmp_path),
        ])

        assert result.exit_code == 0
        content = (tmp_path / "feed-snapchat.xml").read_text(encoding="utf-8")
        assert "<description></description>" in content
        assert "brand_gtin_or_mpn" not in content

    def test_preview_json(self, runner, feed_file, mappings_file):
        result = runner.invoke(cli, [
            "preview", str(feed_file),
            "--mappings", str(mappings_file),
            "--field", "color",
            "--json",
        ])

        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert rows[0]["original_value"] == "red"
        assert rows[0]["mapped_value"] == "N/A"
        assert rows[1]["record_label"] == "Hat & Scarf"

    def test_validate_reports_missing_fields(self, runner, feed_file, mappings_file):
        result = runner.invoke(cli, [
            "validate", str(feed_file),
            "--mappings", str(mappings_file),
            "--channel", "facebook",
        ])

        assert result.exit_code == 1
        assert "Missing mapping for required field description" in result.output


class TestChannelSelector:
    """Test channel selection parsing."""

    @pytest.fixture
    def selector(self):
        return ChannelSelector()

    def test_by_number(self, selector):
        assert selector.parse_selection("1") == "facebook"
        assert selector.parse_selection("9") is None

    def test_by_id_or_name(self, selector):
        assert selector.parse_selection("TikTok") == "tiktok"
        assert selector.parse_selection("facebook product ads") == "facebook"

    def test_unknown(self, selector):
        assert selector.parse_selection("myspace") is None
        assert selector.parse_selection("  ") is None

    def test_shop_channel_names(self):
        """Only the offered channels match, under their shop display names."""
        selector = ChannelSelector(["google"], {"google": "Google EU"})

        assert selector.parse_selection("1") == "google"
        assert selector.parse_selection("google eu") == "google"
        assert selector.parse_selection("facebook") is None
        assert selector.parse_selection("2") is None


class TestInteractive:
    """Test interactive helpers."""

    def test_describe_mapping(self):
        assert describe_mapping(None) == "unmapped"
        assert describe_mapping(Mapping("id", Rename("sku"))) == "rename ← sku"
        assert describe_mapping(Mapping("brand", Static("Acme"))) == 'static "Acme"'

    def test_describe_condition(self):
        mapping = Mapping("t", Combine(["a", "b"], "-"), OnlyIf("s", Operator.EXCLUDES, "x"))
        assert describe_mapping(mapping) == "combine a + b (sep '-') only if s doesn't include \"x\""

    def test_prompt_rename(self, monkeypatch):
        """A rename answered at the prompts becomes a Mapping."""
        answers = iter(["rename", "sku"])
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: next(answers))
        monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: False)

        interactive = InteractiveCLI(ShopService(InMemoryRepository()))
        mapping = interactive._prompt_mapping("id", ["sku", "name"])

        assert mapping == Mapping("id", Rename("sku"))

    def test_prompt_skip(self, monkeypatch):
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: "skip")

        interactive = InteractiveCLI(ShopService(InMemoryRepository()))
        assert interactive._prompt_mapping("id", ["sku"]) is None

    def test_resolve_feed_path(self, tmp_path, monkeypatch):
        """Bare names fall back to the feeds directory."""
        (tmp_path / "shop.xml").write_text(FEED, encoding="utf-8")
        monkeypatch.setattr(app_config, "feeds_dir", str(tmp_path))
        monkeypatch.chdir(tmp_path.parent)

        assert resolve_feed_path("shop.xml") == tmp_path / "shop.xml"
        assert resolve_feed_path("missing.xml") == Path("missing.xml")

    def test_upload_feed(self, tmp_path, monkeypatch):
        service = ShopService(InMemoryRepository())
        shop = service.add_shop("Demo")
        path = tmp_path / "shop.xml"
        path.write_text(FEED, encoding="utf-8")
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: str(path))

        InteractiveCLI(service).upload_feed(shop.id)

        assert service.get_shop(shop.id).product_count == 2

    def test_comments(self, monkeypatch):
        """Comments added interactively are stored on the shop."""
        service = ShopService(InMemoryRepository())
        shop = service.add_shop("Demo")
        answers = iter(["", "Looks good"])
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: next(answers))

        InteractiveCLI(service).comments(shop.id)

        assert [c.text for c in service.comments_for(shop.id)] == ["Looks good"]

    def test_comments_delete(self, monkeypatch):
        service = ShopService(InMemoryRepository())
        shop = service.add_shop("Demo")
        service.add_comment(shop.id, "Old note")
        answers = iter(["", "", 1])
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: next(answers))

        InteractiveCLI(service).comments(shop.id)

        assert service.comments_for(shop.id) == []

    def test_combine_uses_configured_separator(self, monkeypatch):
        answers = iter(["combine", "name, color"])

        def prompt(text, **kwargs):
            if "Separator" in text:
                return kwargs["default"]
            return next(answers)

        monkeypatch.setattr(app_config, "default_separator", " - ")
        monkeypatch.setattr(click, "prompt", prompt)
        monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: False)

        mapping = InteractiveCLI(ShopService(InMemoryRepository()))._prompt_mapping("title", ["name", "color"])

        assert mapping.kind.separator == " - "
        assert list(mapping.kind.fields) == ["name", "color"]


class TestShopMenus:
    """Test the per-shop interactive flows."""

    @pytest.fixture
    def service(self):
        return ShopService(InMemoryRepository())

    @pytest.fixture
    def shop(self, service):
        return service.add_shop("Demo", FEED)

    def test_map_internal(self, service, shop, monkeypatch):
        """Internal fields start from identity mappings and are saved on confirm."""
        answers = iter(["skip", "skip", "static", "blue"])
        confirms = iter([False, True])
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: next(answers))
        monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: next(confirms))

        InteractiveCLI(service).map_internal(shop.id)

        saved = service.load_internal_mappings(shop.id)
        assert [m.target_field for m in saved] == ["sku", "name", "color"]
        assert saved.get("sku") == Mapping("sku", Rename("sku"))
        assert saved.get("color") == Mapping("color", Static("blue"))

    def test_map_internal_locked(self, service, shop, monkeypatch):
        service.toggle_lock(shop.id)
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: pytest.fail("prompted"))

        InteractiveCLI(service).map_internal(shop.id)

        assert len(service.load_internal_mappings(shop.id)) == 0

    def test_export_internal(self, service, shop, tmp_path, monkeypatch):
        """Internal export has no channel constraints and keeps every mapped field."""
        monkeypatch.setattr(app_config, "output_dir", str(tmp_path))
        service.save_internal_mappings(
            shop.id, MappingSet([Mapping("title", Rename("name")), Mapping("g:id", Rename("sku"))])
        )

        InteractiveCLI(service).export_internal(shop.id)

        content = (tmp_path / "Demo-internal.xml").read_text(encoding="utf-8")
        assert "<item><title>Shoe</title><g:id>1</g:id></item>" in content
        assert "<title>Hat &amp; Scarf</title>" in content
        assert ET.fromstring(content.encode("utf-8")).tag == "items"

    def test_export_internal_without_mappings(self, service, shop, tmp_path, monkeypatch):
        monkeypatch.setattr(app_config, "output_dir", str(tmp_path))

        InteractiveCLI(service).export_internal(shop.id)

        content = (tmp_path / "Demo-internal.xml").read_text(encoding="utf-8")
        assert "<item><sku>1</sku><name>Shoe</name><color>red</color></item>" in content

    def test_add_and_rename_channel(self, service, shop, monkeypatch):
        answers = iter([1, "google", "Google EU", 2, "1", "GS", 4])
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: next(answers))

        InteractiveCLI(service).manage_channels(shop.id)

        channels = service.get_shop(shop.id).channels
        assert [(c.id, c.name) for c in channels] == [("google", "GS")]

    def test_remove_channel(self, service, shop, monkeypatch):
        service.add_channel(shop.id, "google")
        service.save_channel_mappings(shop.id, "google", MappingSet([Mapping("id", Rename("sku"))]))
        answers = iter([3, "1", 4])
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: next(answers))
        monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: True)

        InteractiveCLI(service).manage_channels(shop.id)

        stored = service.get_shop(shop.id)
        assert stored.channels == []
        assert stored.mapped_channels == []

    def test_picker_offers_shop_channels(self, service, shop):
        service.add_channel(shop.id, "tiktok", "TikTok Spring")

        selector = channel_selector_for(service.get_shop(shop.id))

        assert selector.channels == ["tiktok"]
        assert selector.parse_selection("1") == "tiktok"
        assert selector.display_name("tiktok") == "TikTok Spring"

    def test_picker_without_shop_channels(self, service, shop):
        selector = channel_selector_for(shop)
        assert selector.channels == ChannelRegistry.get_all_channels()

    def test_rename_lock_and_delete_shop(self, service, shop, monkeypatch):
        monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: "Renamed")
        monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: True)
        interactive = InteractiveCLI(service)

        interactive.rename_shop(shop.id)
        interactive.toggle_lock(shop.id)
        stored = service.get_shop(shop.id)
        assert stored.name == "Renamed"
        assert stored.is_locked is True

        assert interactive.delete_shop(shop.id) is True
        assert service.list_shops() == []

    def test_delete_shop_cancelled(self, service, shop, monkeypatch):
        monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: False)

        assert InteractiveCLI(service).delete_shop(shop.id) is False
        assert service.get_shop(shop.id) is not None

    def test_clear_shops(self, service, shop, monkeypatch):
        monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: True)

        InteractiveCLI(service).clear_shops()

        assert service.list_shops() == []


class TestConfig:
    """Test environment configuration."""

    def test_default_separator_from_env(self, monkeypatch):
        monkeypatch.setenv("FEEDMAP_DEFAULT_SEPARATOR", " | ")
        assert AppConfig.from_env().default_separator == " | "

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FEEDMAP_DEFAULT_SEPARATOR", raising=False)
        assert AppConfig.from_env().default_separator == " "


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
