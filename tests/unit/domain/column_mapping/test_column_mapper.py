"""Unit tests for the rule-based column mapper."""

import logging
from datetime import date

import pytest

from asset_import_hub.config import AliasEntry, AliasTable, Settings, load_alias_table
from asset_import_hub.domain.column_mapping import (
    UNMAPPED,
    ColumnMapper,
    ColumnMapping,
    InMemoryHistoryStore,
    MappingTechnique,
    map_columns,
    resolve_target_collisions,
)
from asset_import_hub.domain.exceptions import InvalidInputError
from asset_import_hub.domain.field_discovery import DataType, FieldDefinition


@pytest.fixture
def asset_aliases():
    return load_alias_table(document_type="asset")


@pytest.fixture
def mapper(asset_aliases):
    return ColumnMapper(alias_table=asset_aliases)


def _by_column(mappings):
    return {m.source_column: m for m in mappings}


@pytest.mark.unit
class TestAliasMatching:
    def test_known_aliases_map_with_table_confidence(self, mapper, asset_fields):
        mappings = mapper.map_columns(
            ["Equipment ID", "Facility", "Unit_ID"], [], asset_fields, document_type="asset"
        )

        assert [m.source_column for m in mappings] == ["Equipment ID", "Facility", "Unit_ID"]
        assert [m.target_path for m in mappings] == [
            "asset_tag",
            "site_code",
            "asset_group_code",
        ]
        assert [m.confidence for m in mappings] == [98, 95, 90]
        assert all(m.technique is MappingTechnique.ALIAS for m in mappings)

    def test_default_table_loaded_from_settings(self, asset_fields):
        mappings = map_columns(["Equipment ID"], None, asset_fields, document_type="asset")

        assert mappings[0].target_path == "asset_tag"
        assert mappings[0].technique is MappingTechnique.ALIAS

    def test_field_declared_aliases(self):
        fields = [FieldDefinition(path="asset_tag", label="Asset Tag", aliases=("Tag #",))]
        mapper = ColumnMapper(alias_table=AliasTable())

        mapping = mapper.map_columns(["TAG #"], [], fields)[0]

        assert mapping.target_path == "asset_tag"
        assert mapping.technique is MappingTechnique.ALIAS
        assert mapping.confidence == 98

    def test_alias_for_missing_field_is_ignored(self, mapper):
        fields = [FieldDefinition(path="site_code", label="Site Code")]

        mapping = mapper.map_columns(["Equipment ID"], [], fields, document_type="asset")[0]

        assert mapping.technique is not MappingTechnique.ALIAS

    def test_zero_confidence_alias_is_disabled(self, asset_fields):
        table = AliasTable(
            entries=(AliasEntry(alias="legacy key", target_path="asset_tag", confidence=0),)
        )

        mapping = ColumnMapper(alias_table=table).map_columns(
            ["Legacy Key"], [], asset_fields
        )[0]

        assert mapping.target_path == UNMAPPED


@pytest.mark.unit
class TestExactMatching:
    def test_label_match(self, mapper, asset_fields):
        mapping = mapper.map_columns(["asset tag"], [], asset_fields)[0]

        assert mapping.target_path == "asset_tag"
        assert mapping.confidence == 95
        assert mapping.technique is MappingTechnique.EXACT

    def test_path_match(self, mapper, asset_fields):
        mapping = mapper.map_columns(["specifications.weight"], [], asset_fields)[0]

        assert mapping.target_path == "specifications.weight"
        assert mapping.confidence == 95

    def test_plural_and_punctuation_are_loose_matches(self, mapper, asset_fields):
        mappings = _by_column(
            mapper.map_columns(["Asset Tags", "Install-Date", "Weights"], [], asset_fields)
        )

        assert mappings["Asset Tags"].target_path == "asset_tag"
        assert mappings["Install-Date"].target_path == "install_date"
        assert mappings["Weights"].target_path == "specifications.weight"
        assert all(m.confidence == 90 for m in mappings.values())
        assert all(m.technique is MappingTechnique.EXACT for m in mappings.values())


@pytest.mark.unit
class TestFuzzyMatching:
    def test_typo_maps_fuzzily_below_exact_band(self, mapper, asset_fields):
        mapping = mapper.map_columns(["Equipmnt Type"], [], asset_fields, document_type="asset")[0]

        assert mapping.target_path == "asset_type"
        assert mapping.technique is MappingTechnique.FUZZY
        assert 60 <= mapping.confidence <= 89

    def test_typo_in_label(self, asset_fields):
        mapping = ColumnMapper(alias_table=AliasTable()).map_columns(
            ["Aset Tag"], [], asset_fields
        )[0]

        assert mapping.target_path == "asset_tag"
        assert mapping.technique is MappingTechnique.FUZZY
        assert mapping.confidence == 89

    def test_threshold_from_settings(self, asset_aliases, asset_fields):
        strict = ColumnMapper(alias_table=asset_aliases, settings=Settings(fuzzy_threshold=95))

        mapping = strict.map_columns(["Equipmnt Type"], [], asset_fields, document_type="asset")[0]

        assert mapping.target_path == UNMAPPED

    def test_unrelated_header_is_unmapped(self, mapper, asset_fields):
        mapping = mapper.map_columns(["Random Notes Column"], [], asset_fields)[0]

        assert mapping.target_path == UNMAPPED
        assert mapping.confidence == 0
        assert mapping.technique is MappingTechnique.NONE


@pytest.mark.unit
class TestPatternMatching:
    def test_date_samples_map_to_only_date_field(self, mapper, asset_fields):
        rows = [
            ["A-1", "2021-03-04"],
            ["A-2", "03/15/2020"],
            ["A-3", date(2019, 1, 2)],
        ]

        mappings = mapper.map_columns(["Asset Tag", "Commissioned"], rows, asset_fields)

        assert mappings[1].target_path == "install_date"
        assert mappings[1].technique is MappingTechnique.PATTERN
        assert mappings[1].confidence == 70

    def test_number_samples_from_mapping_rows(self, mapper, asset_fields):
        rows = [{"Mass (kg)": "12.5"}, {"Mass (kg)": 8}, {"Mass (kg)": "1,200"}]

        mapping = mapper.map_columns(["Mass (kg)"], rows, asset_fields)[0]

        assert mapping.target_path == "specifications.weight"
        assert mapping.technique is MappingTechnique.PATTERN

    def test_ambiguous_type_stays_unmapped(self, mapper):
        fields = [
            FieldDefinition(path="install_date", label="Install Date", data_type=DataType.DATE),
            FieldDefinition(path="retired_on", label="Retired On", data_type=DataType.DATE),
        ]

        mapping = mapper.map_columns(["Commissioned"], [["2021-01-01"]], fields)[0]

        assert mapping.target_path == UNMAPPED

    def test_below_ratio_stays_unmapped(self, mapper, asset_fields):
        rows = [["2021-01-01"], ["n/a"], ["unknown"], ["2020-01-01"], ["2020-02-02"]]

        mapping = mapper.map_columns(["Commissioned"], rows, asset_fields)[0]

        assert mapping.target_path == UNMAPPED

    def test_empty_samples_are_skipped(self, mapper, asset_fields):
        rows = [[None], [""], ["2021-01-01"], [float("nan")]]

        mapping = mapper.map_columns(["Commissioned"], rows, asset_fields)[0]

        assert mapping.target_path == "install_date"

    def test_field_claimed_by_earlier_header_is_unavailable(self, mapper, asset_fields):
        rows = [["2021-01-01", "2022-05-06"]]

        mappings = mapper.map_columns(["Commissioned", "Overhauled"], rows, asset_fields)

        assert mappings[0].target_path == "install_date"
        assert mappings[1].target_path == UNMAPPED

    def test_field_claimed_by_name_match_is_unavailable(self, mapper, asset_fields):
        rows = [["2021-01-01", "2022-05-06"]]

        mappings = mapper.map_columns(["Commissioned", "Install Date"], rows, asset_fields)

        assert mappings[0].target_path == UNMAPPED
        assert mappings[1].target_path == "install_date"
        assert mappings[1].technique is MappingTechnique.EXACT


@pytest.mark.unit
class TestHistoricalMatching:
    def test_confirmed_mapping_wins_over_alias(self, mapper, asset_fields):
        history = InMemoryHistoryStore({("asset", "Facility"): "asset_group_code"})

        mapping = mapper.map_columns(
            ["Facility"], [], asset_fields, history=history, document_type="asset"
        )[0]

        assert mapping.target_path == "asset_group_code"
        assert mapping.technique is MappingTechnique.HISTORICAL
        assert mapping.confidence == 95

    def test_lookup_uses_normalized_header(self, mapper, asset_fields):
        history = InMemoryHistoryStore()
        history.record_confirmed_mapping("asset", "Equipment No", "asset_tag")

        mapping = mapper.map_columns(
            ["  EQUIPMENT__NO "], [], asset_fields, history=history, document_type="asset"
        )[0]

        assert mapping.target_path == "asset_tag"
        assert mapping.technique is MappingTechnique.HISTORICAL

    def test_other_document_type_does_not_apply(self, mapper, asset_fields):
        history = InMemoryHistoryStore({("site", "Facility"): "asset_group_code"})

        mapping = mapper.map_columns(
            ["Facility"], [], asset_fields, history=history, document_type="asset"
        )[0]

        assert mapping.technique is MappingTechnique.ALIAS
        assert mapping.target_path == "site_code"

    def test_stale_target_is_ignored(self, mapper, asset_fields):
        history = InMemoryHistoryStore({("asset", "Facility"): "retired_field"})

        mapping = mapper.map_columns(
            ["Facility"], [], asset_fields, history=history, document_type="asset"
        )[0]

        assert mapping.target_path == "site_code"
        assert mapping.technique is MappingTechnique.ALIAS

    def test_empty_history_store_is_consulted(self, mapper, asset_fields):
        history = InMemoryHistoryStore()

        mapping = mapper.map_columns(
            ["Facility"], [], asset_fields, history=history, document_type="asset"
        )[0]

        assert mapping.technique is MappingTechnique.ALIAS


@pytest.mark.unit
class TestCollisions:
    def test_higher_confidence_keeps_target(self, mapper, asset_fields):
        mappings = mapper.map_columns(["Plant", "Plant Code"], [], asset_fields)

        kept = [m for m in mappings if m.technique is not MappingTechnique.NONE]
        assert len(kept) == 1
        assert kept[0].source_column == "Plant Code"
        assert kept[0].target_path == "site_code"
        assert mappings[0].target_path == UNMAPPED
        assert mappings[0].confidence == 0

    def test_tie_goes_to_earliest_header(self, mapper, asset_fields):
        mappings = mapper.map_columns(["Site Code", "site_code"], [], asset_fields)

        assert mappings[0].target_path == "site_code"
        assert mappings[1].target_path == UNMAPPED

    def test_no_target_claimed_twice(self, mapper, asset_fields):
        headers = [
            "Equipment ID",
            "Asset Tag",
            "Tag No",
            "Facility",
            "Plant",
            "Site Code",
            "Unit",
            "Unit Code",
            "Aset Type",
            "Equipment Type",
        ]

        mappings = mapper.map_columns(headers, [], asset_fields, document_type="asset")
        targets = [m.target_path for m in mappings if m.target_path != UNMAPPED]

        assert len(mappings) == len(headers)
        assert [m.source_column for m in mappings] == headers
        assert len(targets) == len(set(targets))

    def test_resolve_target_collisions_directly(self):
        mappings = [
            ColumnMapping(
                source_column="A", target_path="x", confidence=80,
                technique=MappingTechnique.FUZZY,
            ),
            ColumnMapping(
                source_column="B", target_path="x", confidence=90,
                technique=MappingTechnique.EXACT,
            ),
            ColumnMapping.unmapped("C"),
        ]

        resolved = resolve_target_collisions(mappings)

        assert [m.target_path for m in resolved] == [UNMAPPED, "x", UNMAPPED]


@pytest.mark.unit
class TestInputValidation:
    @pytest.mark.parametrize(
        "headers",
        [[], ["Asset Tag", "Asset Tag"], ["Asset Tag", 42], ["Asset Tag", None]],
    )
    def test_invalid_headers_raise(self, mapper, asset_fields, headers):
        with pytest.raises(InvalidInputError):
            mapper.map_columns(headers, [], asset_fields)

    def test_empty_header_string_is_unmapped(self, mapper, asset_fields):
        mappings = mapper.map_columns(["", "Asset Tag"], [], asset_fields)

        assert mappings[0].target_path == UNMAPPED
        assert mappings[1].target_path == "asset_tag"

    def test_no_fields_maps_nothing(self, mapper):
        mappings = mapper.map_columns(["Asset Tag", "Facility"], [], [])

        assert all(m.target_path == UNMAPPED for m in mappings)

    def test_run_is_logged(self, mapper, asset_fields, caplog):
        caplog.set_level(logging.INFO)

        mapper.map_columns(["Asset Tag"], [], asset_fields)

        assert "column_mapper.run_complete" in caplog.text
