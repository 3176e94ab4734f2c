"""
Tests for the column alias table loader.

Covers the shipped table plus the missing/empty/invalid file behaviour.
"""

from pathlib import Path

import pytest
import yaml

from asset_import_hub.config import AliasEntry, AliasTable, get_alias_table_path, load_alias_table
from asset_import_hub.config.settings import DEFAULT_ALIAS_TABLE
from asset_import_hub.domain.exceptions import AliasTableError


@pytest.fixture
def alias_file(tmp_path):
    """Alias table with a document section, a common section and a weak alias."""
    path = tmp_path / "aliases.yml"
    content = {
        "common": {"site_code": ["plant code", {"alias": "facility", "confidence": 95}]},
        "asset": {"asset_tag": ["equipment id", "tag no"], "asset_type": "equipment type"},
        "site": {"address.city": ["town"]},
    }
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(content, f, allow_unicode=True, sort_keys=False)
    return path


@pytest.mark.unit
class TestLoadAliasTable:
    def test_document_section_then_common(self, alias_file):
        table = load_alias_table(alias_file, document_type="asset")

        assert [e.alias for e in table.entries] == [
            "equipment id",
            "tag no",
            "equipment type",
            "plant code",
            "facility",
        ]
        assert table.lookup("facility").confidence == 95
        assert table.lookup("equipment id").confidence == 98

    def test_all_sections_when_no_document_type(self, alias_file):
        table = load_alias_table(alias_file)

        assert table.lookup("town").target_path == "address.city"
        assert table.lookup("tag no").target_path == "asset_tag"

    def test_other_document_sections_excluded(self, alias_file):
        table = load_alias_table(alias_file, document_type="site")

        assert table.lookup("equipment id") is None
        assert table.lookup("plant code").target_path == "site_code"

    def test_default_confidence_override(self, alias_file):
        table = load_alias_table(alias_file, document_type="asset", default_confidence=97)

        assert table.lookup("tag no").confidence == 97
        assert table.lookup("facility").confidence == 95

    def test_missing_file_returns_empty_table(self, tmp_path):
        table = load_alias_table(tmp_path / "nope.yml", document_type="asset")

        assert table.entries == ()

    def test_empty_file_returns_empty_table(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")

        assert load_alias_table(path).entries == ()

    @pytest.mark.parametrize(
        "content",
        [
            "invalid: yaml: content: [",
            "- just\n- a list\n",
            "asset: [equipment id]\n",
            "asset:\n  asset_tag: 12\n",
            "asset:\n  asset_tag:\n    - {confidence: 90}\n",
            "asset:\n  asset_tag:\n    - {alias: tag, confidence: 150}\n",
        ],
    )
    def test_invalid_content_raises(self, tmp_path, content):
        path = tmp_path / "bad.yml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(AliasTableError) as exc_info:
            load_alias_table(path, document_type="asset")
        assert "bad.yml" in str(exc_info.value)


@pytest.mark.unit
class TestShippedTable:
    def test_shipped_table_exists_and_parses(self):
        assert Path(DEFAULT_ALIAS_TABLE).exists()

        table = load_alias_table(DEFAULT_ALIAS_TABLE)

        assert table.lookup("equipment id").target_path == "asset_tag"
        assert table.lookup("facility").confidence == 95
        assert table.lookup("unit id").confidence == 90

    def test_env_var_overrides_path(self, monkeypatch, alias_file):
        monkeypatch.setenv("AIH_ALIAS_TABLE_PATH", str(alias_file))

        assert get_alias_table_path() == alias_file
        assert load_alias_table(document_type="site").lookup("town") is not None


@pytest.mark.unit
class TestAliasTable:
    def test_extended_appends_with_lower_precedence(self):
        table = AliasTable(entries=(AliasEntry(alias="Tag", target_path="asset_tag"),))

        extended = table.extended([AliasEntry(alias="tag", target_path="serial_number")])

        assert extended.lookup("tag").target_path == "asset_tag"
        assert [e.alias for e in extended.by_target()["serial_number"]] == ["tag"]
        assert list(extended.by_target()) == ["asset_tag", "serial_number"]
        assert table.entries != extended.entries

    def test_lookup_skips_disabled_entries_and_unknown_targets(self):
        table = AliasTable(
            entries=(
                AliasEntry(alias="Unit", target_path="asset_tag", confidence=0),
                AliasEntry(alias="unit", target_path="legacy.unit_no"),
                AliasEntry(alias="unit", target_path="asset_group_code", confidence=80),
            )
        )

        assert table.lookup("unit").target_path == "legacy.unit_no"
        entry = table.lookup("unit", targets={"asset_tag", "asset_group_code"})
        assert entry.target_path == "asset_group_code"
        assert entry.confidence == 80
        assert table.lookup("unit", targets={"asset_tag"}) is None
