"""
Localized text

Per-locale text is stored as parallel columns (``name``, ``name_ar``,
``name_fr``). ``LocalizedText`` holds the default plus per-locale overrides
and resolves them through one fallback rule.
"""

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, Optional

from storefront.catalog.rows import field

SUPPORTED_LOCALES = ("en", "fr", "ar")

# Locales stored in suffixed columns; the bare column is the default text
OVERRIDE_LOCALES = ("ar", "fr")


@dataclass(frozen=True)
class LocalizedText:
    default: str
    overrides: Dict[str, str] = dataclass_field(default_factory=dict)

    def resolve(self, locale: Optional[str] = None) -> str:
        """Override for ``locale`` when present and non-empty, else the default."""
        if locale:
            override = self.overrides.get(locale.lower())
            if override:
                return override
        return self.default


def is_supported_locale(locale: Optional[str]) -> bool:
    return bool(locale) and locale.lower() in SUPPORTED_LOCALES


def localized(row: Any, name: str) -> LocalizedText:
    """Build a LocalizedText from ``<name>`` and its ``<name>_<locale>`` columns."""
    overrides = {}
    for locale in OVERRIDE_LOCALES:
        value = field(row, f"{name}_{locale}")
        if value:
            overrides[locale] = value
    return LocalizedText(default=field(row, name) or "", overrides=overrides)
