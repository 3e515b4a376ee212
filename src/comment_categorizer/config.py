import sys
from pathlib import Path

import yaml

from comment_categorizer.categories import DEFAULT_CATEGORY, normalize_category
from comment_categorizer.context import STRATEGIES
from comment_categorizer.errors import ConfigError
from comment_categorizer.pipeline import DEFAULT_FREE_TEXT_COLUMN

ALIASES = {
    'paths': {'model_path': 'model'},
    'columns': {'delegate_comments': 'free_text'},
    'classification': {'default': 'default_category'},
}

OPTIONAL_PATHS = ['training_data', 'model', 'keyword_rules']


def _apply_aliases(config: dict) -> list[str]:
    warnings = []
    for section, mappings in ALIASES.items():
        if not isinstance(config.get(section), dict):
            continue
        for old_key, new_key in mappings.items():
            if old_key in config[section] and new_key not in config[section]:
                config[section][new_key] = config[section].pop(old_key)
                warnings.append(
                    f"DEPRECATION: '{section}.{old_key}' renamed to "
                    f"'{section}.{new_key}'. Update your config."
                )
    return warnings


def _positive_int(classif: dict, key: str, default: int) -> int:
    value = classif.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"'classification.{key}' must be a positive integer, got {value!r}")
    return value


def load_config(config_path: str, input_override: str = None, output_dir_override: str = None,
                strategy_override: str = None, workers_override: int = None,
                require_input: bool = True) -> dict:
    config_path = Path(config_path).resolve()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")

    alias_warnings = _apply_aliases(config)
    for w in alias_warnings:
        print(f"  {w}", file=sys.stderr)

    base_dir = config_path.parent

    required_sections = ['paths']
    for section in required_sections:
        if not isinstance(config.get(section), dict):
            raise ConfigError(f"Missing required config section: '{section}'")
    config['client'] = config.get('client') or {}
    config['client'].setdefault('name', config_path.parent.name)

    required_paths = ['input', 'output_dir']
    for key in required_paths:
        if key == 'input' and (input_override or not require_input):
            continue
        if key not in config['paths']:
            raise ConfigError(f"Missing required path: 'paths.{key}'")

    columns = config['columns'] = config.get('columns') or {}
    columns.setdefault('free_text', DEFAULT_FREE_TEXT_COLUMN)
    if not isinstance(columns['free_text'], str) or not columns['free_text'].strip():
        raise ConfigError("'columns.free_text' must be a non-empty column name")

    classif = config['classification'] = config.get('classification') or {}
    if strategy_override:
        classif['strategy'] = strategy_override
    classif.setdefault('strategy', 'rules')
    if classif['strategy'] not in STRATEGIES:
        raise ConfigError(
            f"Unknown 'classification.strategy': '{classif['strategy']}' (expected {' or '.join(STRATEGIES)})"
        )
    try:
        classif['default_category'] = normalize_category(classif.get('default_category', DEFAULT_CATEGORY))
    except ValueError as e:
        raise ConfigError(f"'classification.default_category': {e}")
    if workers_override is not None:
        classif['workers'] = workers_override
    classif['workers'] = _positive_int(classif, 'workers', 1)
    classif['batch_size'] = _positive_int(classif, 'batch_size', 500)

    resolved = {}
    if input_override:
        resolved['input'] = Path(input_override).resolve()
    else:
        resolved['input'] = (base_dir / config['paths'].get('input', '')).resolve()
    resolved['output_dir'] = (base_dir / config['paths']['output_dir']).resolve()
    if output_dir_override:
        resolved['output_dir'] = Path(output_dir_override).resolve()
    resolved['output_prefix'] = config['paths'].get('output_prefix') or resolved['input'].stem
    for key in OPTIONAL_PATHS:
        value = config['paths'].get(key)
        resolved[key] = (base_dir / value).resolve() if value else None

    config['_resolved_paths'] = resolved

    if require_input and not resolved['input'].exists():
        raise ConfigError(f"File not found: {resolved['input']} (from paths.input)")
    if resolved['keyword_rules'] is not None and not resolved['keyword_rules'].exists():
        raise ConfigError(f"File not found: {resolved['keyword_rules']} (from paths.keyword_rules)")
    if classif['strategy'] == 'model' and resolved['model'] is None and resolved['training_data'] is None:
        raise ConfigError("Strategy 'model' needs 'paths.model' or 'paths.training_data'")

    return config
