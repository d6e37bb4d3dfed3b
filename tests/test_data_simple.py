"""
Simple test suite for trivia_grid.data module.
Tests entity structures, the membership predicate, entity loading and game storage.
"""

import json
import os
import tempfile
from unittest.mock import patch

import pytest

from trivia_grid.data.data_structure import (
    Entity,
    FeatureDimension,
    RoleStint,
    TeamStint,
    feature_values,
    is_header_allowed,
    is_valid_pairing,
    matches,
)
from trivia_grid.data.entity_loader import EntityLoader
from trivia_grid.data.game_store import LocalGameStore
from trivia_grid.utils.team_filters import TeamFilter

TEAM = FeatureDimension.TEAM
ROLE = FeatureDimension.ROLE
NATIONALITY = FeatureDimension.NATIONALITY


def sample_entity():
    return Entity(
        name="Hakan Şükür",
        nationality="Türkiye",
        team_history=(
            TeamStint("Galatasaray", (RoleStint("Forvet", "1995", "9"), RoleStint("Forvet", "1996"))),
            TeamStint("Inter", (RoleStint("Forvet", "2000"),)),
            TeamStint("Sakaryaspor U19", ()),
        ),
    )


class TestEntity:
    """Test Entity dataclass functionality."""

    def test_teams_and_roles(self):
        entity = sample_entity()

        assert entity.teams == ("Galatasaray", "Inter", "Sakaryaspor U19")
        assert entity.roles == ("Forvet", "Forvet", "Forvet")

    def test_entity_is_immutable(self):
        entity = sample_entity()

        with pytest.raises(Exception):
            entity.name = "Someone else"


class TestMatches:
    """Test the single membership predicate."""

    def test_nationality(self):
        assert matches(sample_entity(), NATIONALITY, "Türkiye")
        assert not matches(sample_entity(), NATIONALITY, "Brezilya")

    def test_team_any_stint(self):
        assert matches(sample_entity(), TEAM, "Inter")
        assert not matches(sample_entity(), TEAM, "Fenerbahçe")

    def test_role_any_season(self):
        assert matches(sample_entity(), ROLE, "Forvet")
        assert not matches(sample_entity(), ROLE, "Kaleci")

    def test_excluded_team_never_matches(self):
        team_filter = TeamFilter(excluded_teams=["U19"], preferred_teams=[], low_priority_teams=[])

        assert matches(sample_entity(), TEAM, "Sakaryaspor U19")
        assert not matches(sample_entity(), TEAM, "Sakaryaspor U19", team_filter)
        assert matches(sample_entity(), TEAM, "Galatasaray", team_filter)

    def test_feature_values_per_dimension(self):
        entity = sample_entity()

        assert feature_values(entity, NATIONALITY) == ("Türkiye",)
        assert feature_values(entity, TEAM) == entity.teams
        assert feature_values(entity, ROLE) == entity.roles
        assert feature_values(Entity(name="Nobody", nationality=""), NATIONALITY) == ()

    def test_header_allowed_only_checks_teams(self):
        team_filter = TeamFilter(excluded_teams=["U19"], preferred_teams=[], low_priority_teams=[])

        assert not is_header_allowed(TEAM, "Sakaryaspor U19", team_filter)
        assert is_header_allowed(TEAM, "Sakaryaspor U19")
        assert is_header_allowed(ROLE, "U19", team_filter)


class TestPairing:
    """Test the degenerate pairing rule."""

    def test_cross_dimension_pairs_valid(self):
        assert is_valid_pairing(TEAM, ROLE)
        assert is_valid_pairing(ROLE, NATIONALITY)
        assert is_valid_pairing(NATIONALITY, TEAM)

    def test_same_dimension_pairs_invalid(self):
        assert not is_valid_pairing(NATIONALITY, NATIONALITY, allow_team_pairs=True)
        assert not is_valid_pairing(ROLE, ROLE, allow_team_pairs=True)

    def test_team_pairs_only_when_enabled(self):
        assert not is_valid_pairing(TEAM, TEAM)
        assert is_valid_pairing(TEAM, TEAM, allow_team_pairs=True)


class TestEntityLoader:
    """Test entity loading from records and files."""

    def test_from_records(self):
        records = [
            {
                "name": "  Gheorghe   Hagi ",
                "nationality": "Romanya",
                "teamHistory": [
                    {"team": "Galatasaray", "seasons": [{"role": "Orta Saha", "year": 1996}]},
                    {"team": "Barcelona", "seasons": [{"role": "Orta Saha", "season": "1994"}]},
                ],
            },
            {"nationality": "Türkiye"},
            {"name": "Gheorghe Hagi", "nationality": "Romanya"},
        ]

        loader = EntityLoader()
        entities = loader.from_records(records)

        assert len(entities) == 1
        assert loader.skipped_records == 2
        hagi = entities[0]
        assert hagi.name == "Gheorghe Hagi"
        assert hagi.teams == ("Galatasaray", "Barcelona")
        assert hagi.team_history[0].seasons[0].year == "1996"
        assert hagi.team_history[1].seasons[0].year == "1994"

    def test_non_object_records_skipped(self):
        records = [None, 5, "Gheorghe Hagi", ["name"], {"name": "Arda Turan", "nationality": "Türkiye"}]

        loader = EntityLoader()
        entities = loader.from_records(records)

        assert [entity.name for entity in entities] == ["Arda Turan"]
        assert loader.skipped_records == 4

    def test_snake_case_history(self):
        entities = EntityLoader().from_records(
            [{"name": "A", "nationality": "X", "team_history": [{"team": "T", "seasons": [{"role": "R"}]}]}]
        )

        assert entities[0].teams == ("T",)
        assert entities[0].roles == ("R",)

    def test_raw_teams_json_string(self):
        raw = json.dumps([{"team": "Fenerbahçe", "seasons": [{"role": "Defans", "jersey_number": 4}]}])
        entities = EntityLoader().from_records([{"name": "B", "nationality": "Y", "teams": raw}])

        assert entities[0].teams == ("Fenerbahçe",)
        assert entities[0].team_history[0].seasons[0].jersey_number == "4"

    def test_unparseable_teams_string(self):
        entities = EntityLoader().from_records([{"name": "C", "nationality": "Z", "teams": "{not json"}])

        assert entities[0].team_history == ()

    def test_load_json_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "players.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"players": [{"name": "D", "nationality": "Türkiye"}]}, f, ensure_ascii=False)

            entities = EntityLoader().load_json(path)

        assert [entity.name for entity in entities] == ["D"]

    def test_load_json_rejects_non_list(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "bad.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"name": "E"}, f)

            with pytest.raises(ValueError):
                EntityLoader().load_json(path)

    @patch("trivia_grid.data.entity_loader.load_dataset")
    def test_load_hub_dataset(self, mock_load_dataset):
        mock_load_dataset.return_value = [{"name": "F", "nationality": "Brezilya"}]

        loader = EntityLoader(hf_token="hf_test")
        entities = loader.load_hub_dataset("user/players", split="train")

        assert entities[0].name == "F"
        mock_load_dataset.assert_called_once_with("user/players", split="train", token="hf_test")


class TestLocalGameStore:
    """Test local game persistence."""

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            store = LocalGameStore(temp_dir)

            path = store.save_game("single_abc_1", {"gameMode": "single"}, [{"questionNumber": 1}])

            assert os.path.exists(path)
            document = store.load_game("single_abc_1")
            assert document["game"] == {"gameMode": "single"}
            assert document["questions"] == [{"questionNumber": 1}]
            assert store.list_game_ids() == ["single_abc_1"]

    def test_unsafe_ids_sanitized(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            store = LocalGameStore(temp_dir)

            path = store.save_game("../escape/id", {}, [])

            assert os.path.dirname(path) == str(store.store_dir)
            assert store.load_game("../escape/id") == {"game": {}, "questions": []}

    def test_missing_and_delete(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            store = LocalGameStore(temp_dir)
            store.save_game("g1", {}, [])

            assert store.load_game("missing") is None
            assert store.delete_game("g1")
            assert not store.delete_game("g1")

    def test_empty_id_rejected(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            with pytest.raises(ValueError):
                LocalGameStore(temp_dir).save_game("", {}, [])
