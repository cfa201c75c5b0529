"""
Message catalogs for goalpath.

Catalogs live in goalpath/locales/<locale>.yaml as nested mappings and are
addressed with dotted keys ("review.streak"). Placeholders use {name}.
Lookup order: requested locale -> English -> the key itself.
"""
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

LOCALES_DIR = Path(__file__).parent / "locales"
SUPPORTED_LOCALES = ("en", "es")
FALLBACK_LOCALE = "en"


@lru_cache(maxsize=None)
def load_catalog(locale: str) -> Dict[str, Any]:
    path = LOCALES_DIR / f"{locale}.yaml"
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _lookup(catalog: Dict[str, Any], key: str) -> Optional[str]:
    current: Any = catalog
    for part in key.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current if isinstance(current, str) else None


def translate(locale: str, key: str, params: Optional[Dict[str, Any]] = None) -> str:
    message = _lookup(load_catalog(locale), key)
    if message is None and locale != FALLBACK_LOCALE:
        message = _lookup(load_catalog(FALLBACK_LOCALE), key)
    if message is None:
        return key

    for name, value in (params or {}).items():
        message = message.replace(f"{{{name}}}", str(value))
    return message


def get_locale(user_locale: Optional[str], default_locale: str = FALLBACK_LOCALE) -> str:
    if user_locale in SUPPORTED_LOCALES:
        return user_locale
    return default_locale
