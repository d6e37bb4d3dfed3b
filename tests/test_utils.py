"""
Test suite for trivia_grid.utils module.
Tests configuration loading, team filtering and text helpers.
"""

import os
import tempfile
from unittest.mock import MagicMock, patch

from trivia_grid.utils.config_loader import ConfigLoader
from trivia_grid.utils.team_filters import TeamFilter
from trivia_grid.utils.unicode_utils import clean_unicode_text, is_blank, normalize_answer


def write_config(temp_dir, text):
    path = os.path.join(temp_dir, "test_config.txt")
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return path


class TestConfigLoader:
    """Test configuration parsing and grouped views."""

    def test_typed_values(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = write_config(
                temp_dir,
                "# comment\n"
                "MINIMUM_ANSWERS_REQUIRED=4\n"
                "GENERATION_TIMEOUT_SECONDS=2.5\n"
                "INCLUDE_TEAM_PAIRS=true\n"
                "EXCLUDED_TEAMS=U19, Reserve Team ,\n"
                "not a config line\n",
            )
            config = ConfigLoader(path)

        generation = config.get_generation_config()
        assert generation["min_answers_required"] == 4
        assert generation["generation_timeout_seconds"] == 2.5
        assert generation["include_team_pairs"] is True
        assert generation["min_valid_cells"] == 7
        assert config.get_team_filter_config()["excluded_teams"] == ["U19", "Reserve Team"]

    def test_invalid_int_falls_back_to_default(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            config = ConfigLoader(write_config(temp_dir, "MAX_GENERATION_ATTEMPTS=many\n"))

        assert config.get_generation_config()["max_generation_attempts"] == 50

    def test_missing_file_uses_defaults(self):
        config = ConfigLoader("does_not_exist_config.txt")

        generation = config.get_generation_config()
        assert generation["min_answers_required"] == 3
        assert generation["min_valid_cells"] == 7
        assert generation["include_team_pairs"] is False
        assert "U19" in config.get_team_filter_config()["excluded_teams"]

    def test_missing_file_defaults_match_shipped_config(self):
        defaults = ConfigLoader("does_not_exist_config.txt")
        shipped = ConfigLoader()

        team_filter = TeamFilter.from_config(defaults.get_team_filter_config())
        assert team_filter.is_excluded("Celtic")
        assert team_filter.is_excluded("Leeds")
        assert defaults.get_team_filter_config() == shipped.get_team_filter_config()

        templates = defaults.get_fallback_templates()
        assert len(templates) == 3
        assert templates == shipped.get_fallback_templates()
        assert defaults.get_cli_defaults()["count"] == 1

    def test_fallback_templates(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            config = ConfigLoader(
                write_config(
                    temp_dir,
                    "FALLBACK_TEMPLATE_1_ROWS=team:A,team:B,team:C\n"
                    "FALLBACK_TEMPLATE_1_COLS=role:X,role:Y,nationality:Z\n"
                    "FALLBACK_TEMPLATE_2_ROWS=team:D\n",
                )
            )

        assert config.get_fallback_templates() == [
            {"rows": ["team:A", "team:B", "team:C"], "cols": ["role:X", "role:Y", "nationality:Z"]}
        ]

    def test_cli_defaults(self):
        config = ConfigLoader("does_not_exist_config.txt")

        defaults = config.get_cli_defaults()
        assert defaults["game_mode"] == "single"
        assert defaults["count"] == 1


class TestTeamFilter:
    """Test team exclusion and priority rules."""

    def _filter(self):
        return TeamFilter(
            excluded_teams=["U19", "Celtic"],
            preferred_teams=["Galatasaray", "Real Madrid"],
            low_priority_teams=["2. Lig"],
        )

    def test_exclusion_by_containment(self):
        team_filter = self._filter()

        assert team_filter.is_excluded("Barcelona U19")
        assert team_filter.is_excluded("celtic")
        assert not team_filter.is_excluded("Galatasaray")

    def test_preferred_requires_exact_match(self):
        team_filter = self._filter()

        assert team_filter.is_preferred("galatasaray")
        assert not team_filter.is_preferred("Galatasaray U19")
        assert not team_filter.is_preferred("Real")

    def test_priority_scores(self):
        team_filter = self._filter()

        assert team_filter.priority_score("Celtic") == -1
        assert team_filter.priority_score("Galatasaray") == 3
        assert team_filter.priority_score("Bandırmaspor 2. Lig") == 1
        assert team_filter.priority_score("Konyaspor") == 2

    def test_explicit_lists_skip_config(self):
        with patch("trivia_grid.utils.team_filters.get_config") as mock_get_config:
            team_filter = self._filter()

        mock_get_config.assert_not_called()
        assert team_filter.excluded_count == 2

    @patch("trivia_grid.utils.team_filters.get_config")
    def test_defaults_from_config(self, mock_get_config):
        mock_config = MagicMock()
        mock_config.get_team_filter_config.return_value = {
            "excluded_teams": ["Academy"],
            "preferred_teams": ["Beşiktaş"],
            "low_priority_teams": [],
        }
        mock_get_config.return_value = mock_config

        team_filter = TeamFilter()

        assert team_filter.is_excluded("Ajax Academy")
        assert team_filter.is_preferred("Beşiktaş")

    def test_from_config(self):
        team_filter = TeamFilter.from_config({"excluded_teams": ["Reserve"]})

        assert team_filter.is_excluded("Reserve Team")
        assert not team_filter.is_preferred("Galatasaray")


class TestUnicodeUtils:
    """Test text helpers."""

    def test_clean_unicode_text(self):
        assert clean_unicode_text("  Hakan   Şükür ") == "Hakan Şükür"
        assert clean_unicode_text("Fenerbahçe") == "Fenerbahçe"
        assert clean_unicode_text("   ") is None
        assert clean_unicode_text(None) is None

    def test_is_blank(self):
        assert is_blank("")
        assert is_blank("  ")
        assert is_blank(None)
        assert not is_blank("Messi")

    def test_normalize_answer(self):
        assert normalize_answer(" Messi ") == "messi"
        assert normalize_answer("Çağlar") != normalize_answer("Caglar")
