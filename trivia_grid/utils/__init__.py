"""
Utilities package for the Trivia Grid generator.

This package provides configuration management, team filtering and text helpers.
"""

from .unicode_utils import clean_unicode_text, is_blank, normalize_answer
from .config_loader import ConfigLoader, get_config, reload_config
from .team_filters import TeamFilter

__all__ = [
    'clean_unicode_text', 'is_blank', 'normalize_answer',
    'ConfigLoader', 'get_config', 'reload_config',
    'TeamFilter',
]
