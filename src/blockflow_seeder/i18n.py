"""Localized values carried by in-code specs and how they are resolved.

Specs hold every supported locale; persisted records hold exactly one string
picked by `resolve_text` / `resolve_schema`. Comparison code only ever sees the
resolved strings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_validator

SUPPORTED_LOCALES: tuple[str, ...] = ("en", "ja")
DEFAULT_LOCALE = "ja"


def _fallback_order(locale: str) -> tuple[str, ...]:
    if locale in SUPPORTED_LOCALES:
        return (locale, *(other for other in SUPPORTED_LOCALES if other != locale))
    return (DEFAULT_LOCALE, *(other for other in SUPPORTED_LOCALES if other != DEFAULT_LOCALE))


class LocalizedText(BaseModel):
    """Text with one variant per supported locale.

    A plain string is accepted and used for every locale.
    """

    en: str = ""
    ja: str = ""

    @model_validator(mode="before")
    @classmethod
    def _coerce_plain_string(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, str):
            return {locale: data for locale in SUPPORTED_LOCALES}
        return data

    def is_empty(self) -> bool:
        return not any(getattr(self, locale) for locale in SUPPORTED_LOCALES)


class LocalizedSchema(BaseModel):
    """A JSON schema document per locale, kept as raw JSON text.

    Raw text (rather than parsed objects) is what gets persisted and compared,
    so whitespace and key order differences are handled by `json_equal`.
    """

    en: str | None = None
    ja: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_single_document(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, str):
            return {locale: data for locale in SUPPORTED_LOCALES}
        return data


def _is_absent_schema(raw: str | None) -> bool:
    return raw is None or not raw.strip() or raw.strip() == "null"


def resolve_text(text: LocalizedText, locale: str) -> str:
    """Pick the variant for `locale`, falling back to the other locales."""

    for candidate in _fallback_order(locale):
        value = getattr(text, candidate)
        if value:
            return value
    return ""


def resolve_schema(schema: LocalizedSchema, locale: str) -> str | None:
    """Pick the schema for `locale`; empty or `null` documents fall through."""

    for candidate in _fallback_order(locale):
        raw = getattr(schema, candidate)
        if not _is_absent_schema(raw):
            return raw
    return None
