"""Tests for XML serialization, mapping files and the end-to-end flow."""
import json

import pytest

from feedmap.engine import apply_mappings
from feedmap.errors import MappingError
from feedmap.exporter.json_exporter import JsonMappingExporter
from feedmap.exporter.xml_exporter import XmlExporter, escape_text, generate_xml, suggested_filename
from feedmap.mapper.mapping import Mapping, MappingSet, OnlyIf, Operator, Rename, Static
from feedmap.parser.xml_parser import XmlFeedParser
from feedmap.schema.channels import ChannelRegistry
from feedmap.schema.models import ChannelField


class TestGenerateXml:
    """Test the XML serializer."""

    def test_no_schema_writes_every_key(self):
        xml = generate_xml([{"id": "1", "title": "Shoe"}, {"id": "2"}])
        assert xml == "<items><item><id>1</id><title>Shoe</title></item><item><id>2</id></item></items>"

    def test_empty_records(self):
        assert generate_xml([]) == "<items></items>"

    def test_empty_record_is_self_closing(self):
        assert generate_xml([{}]) == "<items><item/></items>"

    def test_escaping(self):
        assert generate_xml([{"t": "A & B < C"}]) == "<items><item><t>A &amp; B &lt; C</t></item></items>"

    def test_escape_all_metacharacters(self):
        """Ampersand is replaced first so entities are not double escaped."""
        assert escape_text("&<>\"'") == "&amp;&lt;&gt;&quot;&apos;"
        assert escape_text("&amp;") == "&amp;amp;"

    def test_schema_omits_empty_optional(self):
        """Optional fields with empty values are left out, required ones kept."""
        schema = [ChannelField("id"), ChannelField("color", optional=True)]
        xml = generate_xml([{"id": "1", "color": ""}], schema)

        assert xml == "<items><item><id>1</id></item></items>"

    def test_schema_writes_empty_required(self):
        """A required field with no value becomes an empty element."""
        schema = [ChannelField("id"), ChannelField("color", optional=True)]
        xml = generate_xml([{"color": ""}], schema)

        assert xml == "<items><item><id></id></item></items>"

    def test_schema_order_and_unknown_keys(self):
        """Schema order wins and keys outside the schema are dropped."""
        schema = [ChannelField("id"), ChannelField("title")]
        xml = generate_xml([{"title": "Shoe", "id": "1", "extra": "x"}], schema)

        assert xml == "<items><item><id>1</id><title>Shoe</title></item></items>"

    def test_record_never_dropped(self):
        schema = [ChannelField("color", optional=True)]
        assert generate_xml([{}, {}], schema) == "<items><item/><item/></items>"

    def test_namespaces_declared_on_root(self):
        xml = generate_xml([{"g:id": "1"}], namespaces={"g": "http://base.google.com/ns/1.0"})
        assert xml == (
            '<items xmlns:g="http://base.google.com/ns/1.0">'
            "<item><g:id>1</g:id></item></items>"
        )

    def test_known_prefix_declared_when_missing(self):
        """A g: field is bound to the Google namespace even if the feed had none."""
        records = apply_mappings([{"a": "1"}], MappingSet([Mapping("g:id", Rename("a"))]))
        xml = generate_xml(records)

        assert xml == (
            '<items xmlns:g="http://base.google.com/ns/1.0">'
            "<item><g:id>1</g:id></item></items>"
        )
        assert XmlFeedParser().parse(xml).records == [{"g:id": "1"}]

    def test_unknown_prefix_still_well_formed(self):
        records = apply_mappings([{"a": "1"}], MappingSet([Mapping("shop:sku", Rename("a"))]))
        xml = generate_xml(records, [ChannelField("shop:sku")])

        assert 'xmlns:shop="urn:feedmap:shop"' in xml
        assert XmlFeedParser().parse(xml).records == [{"shop:sku": "1"}]

    def test_declared_prefix_kept(self):
        xml = generate_xml([{"g:id": "1"}], namespaces={"g": "urn:custom"})
        assert xml.startswith('<items xmlns:g="urn:custom">')

    def test_output_reparses(self):
        """Serializer output parses back to the same records."""
        records = [{"id": "1", "t": "A & B < C \"quoted\" it's"}, {"id": "2"}]
        data = XmlFeedParser().parse(generate_xml(records))

        assert data.records == records

    def test_suggested_filename(self):
        assert suggested_filename("MyShop", "facebook") == "MyShop-facebook.xml"


class TestXmlExporter:
    """Test writing exports to disk."""

    def test_export(self, tmp_path):
        output_file = XmlExporter().export(tmp_path / "out", "shop", "google", [{"g_id": "1"}])

        assert output_file.name == "shop-google.xml"
        assert output_file.read_text(encoding="utf-8") == "<items><item><g_id>1</g_id></item></items>"


class TestJsonMappingExporter:
    """Test mapping file export and load."""

    @pytest.fixture
    def mappings(self):
        return MappingSet([
            Mapping("id", Rename("sku")),
            Mapping("brand", Static("Acme"), OnlyIf("status", Operator.EQUAL_TO, "active")),
        ])

    def test_export_and_load(self, tmp_path, mappings):
        path = tmp_path / "mappings.json"
        JsonMappingExporter().export(path, mappings, channel_id="facebook", source_file="feed.xml")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["metadata"]["channel"] == "facebook"
        assert data["metadata"]["total_mappings"] == 2

        assert JsonMappingExporter().load(path) == mappings

    def test_load_bare_list(self, tmp_path):
        path = tmp_path / "mappings.json"
        path.write_text(json.dumps([{"target_field": "id", "type": "rename", "source_field": "sku"}]))

        loaded = JsonMappingExporter().load(path)
        assert loaded.get("id") == Mapping("id", Rename("sku"))

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "mappings.json"
        path.write_text("{not json")

        with pytest.raises(MappingError):
            JsonMappingExporter().load(path)

    def test_load_invalid_mapping(self, tmp_path):
        path = tmp_path / "mappings.json"
        path.write_text(json.dumps([{"target_field": "id", "type": "rename"}]))

        with pytest.raises(MappingError):
            JsonMappingExporter().load(path)


class TestEndToEnd:
    """Parse, map and serialize a small feed."""

    FEED = (
        "<items>"
        "<item><sku>1</sku><name>Shoe</name></item>"
        "<item><sku>2</sku><name>Hat</name></item>"
        "</items>"
    )

    def test_parse_map_serialize(self):
        data = XmlFeedParser().parse(self.FEED)
        mappings = MappingSet([
            Mapping("id", Rename("sku")),
            Mapping("title", Rename("name")),
        ])

        output = generate_xml(apply_mappings(data.records, mappings))

        assert output == (
            "<items>"
            "<item><id>1</id><title>Shoe</title></item>"
            "<item><id>2</id><title>Hat</title></item>"
            "</items>"
        )

    def test_schema_constrained_scenario(self):
        """Extra source fields and empty optional channel fields are left out."""
        feed = (
            "<items>"
            "<item><sku>1</sku><name>Shoe</name><color>Red</color></item>"
            "<item><sku>2</sku><name>Hat</name><color>Blue</color></item>"
            "</items>"
        )
        schema = [ChannelField("id"), ChannelField("title"), ChannelField("brand", optional=True)]
        mappings = MappingSet([
            Mapping("id", Rename("sku")),
            Mapping("title", Rename("name")),
        ])

        data = XmlFeedParser().parse(feed)
        output = generate_xml(apply_mappings(data.records, mappings), schema)

        assert output == (
            "<items>"
            "<item><id>1</id><title>Shoe</title></item>"
            "<item><id>2</id><title>Hat</title></item>"
            "</items>"
        )

    def test_channel_export_keeps_required_fields(self):
        """Every facebook field is required, so unmapped ones are written empty."""
        data = XmlFeedParser().parse(self.FEED)
        schema = ChannelRegistry.get_schema("facebook")
        mappings = MappingSet([Mapping("id", Rename("sku"))])

        output = generate_xml(apply_mappings(data.records, mappings, schema), schema)
        reparsed = XmlFeedParser().parse(output)

        assert [r["id"] for r in reparsed.records] == ["1", "2"]
        assert [e.name for e in reparsed.schema] == [f.name for f in schema]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
