"""
Configuration loading for the bracket service and CLI.

Settings live in a YAML file (data/bracket.yaml by default, or the path in the
BRACKET_CONFIG environment variable). Missing keys fall back to DEFAULTS.
"""
import os
import yaml

from brackets.errors import InvalidInput
from brackets.models import FORMATS, SEEDING_MODES

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DEFAULT_CONFIG_FILE = os.path.join(BASE_DIR, 'data', 'bracket.yaml')

DEFAULTS = {
    'format': 'single_elimination',
    'seeding': 'seeded',
    'random_seed': None,
    'data_dir': os.path.join(BASE_DIR, 'data'),
    'lock_timeout': 10,
    'log_level': 'INFO',
}


def load_config(path=None) -> dict:
    """Load settings from YAML, apply environment overrides and validate them."""
    path = path or os.environ.get('BRACKET_CONFIG', DEFAULT_CONFIG_FILE)
    config = dict(DEFAULTS)
    if os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise InvalidInput(f"{path} must contain a mapping of settings")
        config.update({k: v for k, v in data.items() if v is not None or k == 'random_seed'})

    if os.environ.get('TOURNAMENT_DATA_DIR'):
        config['data_dir'] = os.environ['TOURNAMENT_DATA_DIR']

    if config['format'] not in FORMATS:
        raise InvalidInput(f"Unknown tournament format in config: {config['format']!r}")
    if config['seeding'] not in SEEDING_MODES:
        raise InvalidInput(f"Unknown seeding mode in config: {config['seeding']!r}")
    if config['random_seed'] is not None and not isinstance(config['random_seed'], int):
        raise InvalidInput(f"random_seed must be an integer, got {config['random_seed']!r}")
    try:
        config['lock_timeout'] = float(config['lock_timeout'])
    except (TypeError, ValueError):
        raise InvalidInput(f"lock_timeout must be a number, got {config['lock_timeout']!r}")
    config['log_level'] = str(config['log_level']).upper()
    return config


def load_participants(path) -> list:
    """
    Load participant ids from YAML.

    Accepts either a plain list or a mapping with a 'participants' list:

        participants:
          - alice
          - bob
    """
    with open(path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if isinstance(data, dict):
        data = data.get('participants')
    if not isinstance(data, list):
        raise InvalidInput(f"{path} must hold a list of participants")
    return data
