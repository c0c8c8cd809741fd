import json
import logging
import os
from copy import deepcopy

DEFAULT_CONFIG = {
    'cache': {
        'max_entries': 10,
        'now_granularity_minutes': 1,
    },
    'log_level': 'WARNING',
}


def _config_path():
    base = os.path.join(os.path.expanduser('~'), '.renalcompass')
    os.makedirs(base, exist_ok=True)
    return os.path.join(base, 'renalcompass_config.json')


def _merge(defaults: dict, stored: dict) -> dict:
    out = deepcopy(defaults)
    for key, value in stored.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_config():
    path = _config_path()
    if not os.path.exists(path):
        return deepcopy(DEFAULT_CONFIG)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            stored = json.load(f)
    except (OSError, ValueError) as e:
        logging.error(f"Konfiguration {path} nicht lesbar: {e}")
        return deepcopy(DEFAULT_CONFIG)
    if not isinstance(stored, dict):
        return deepcopy(DEFAULT_CONFIG)
    return _merge(DEFAULT_CONFIG, stored)


def save_config(cfg: dict):
    path = _config_path()
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(cfg, f, ensure_ascii=False, indent=2)
