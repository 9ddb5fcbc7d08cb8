"""Bundled user-facing messages (Japanese and English)."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .const import DEFAULT_LOCALE, MANY_ERRORS_THRESHOLD, SUPPORTED_LOCALES

_LOGGER = logging.getLogger(__name__)

MESSAGE_RESOURCES: Dict[str, Dict[str, Dict[str, str]]] = {
    "ja": {
        "critical": {
            "title": "データ読み込みエラー",
            "message": "潮汐データの読み込みに失敗しました。",
            "suggestion": "データ形式を確認するか、時間をおいて再試行してください。",
        },
        "error": {
            "title": "データ異常",
            "message": "潮汐データに異常な値が含まれています。",
            "suggestion": "一部のデータを除外してグラフを表示します。",
        },
        "multiple_errors": {
            "title": "データ異常",
            "message": "複数のデータに異常があります（{stats}）",
            "suggestion": "問題のあるデータを除外してグラフを表示します。",
        },
        "warning": {
            "title": "データ品質注意",
            "message": "一部のデータに軽微な問題があります。",
            "suggestion": "グラフは正常に表示されますが、精度が低下する可能性があります。",
        },
    },
    "en": {
        "critical": {
            "title": "Data Loading Error",
            "message": "Failed to load tide data.",
            "suggestion": "Please check the data format or try again later.",
        },
        "error": {
            "title": "Data Anomaly",
            "message": "Abnormal values found in tide data.",
            "suggestion": "Chart will be displayed excluding problematic data.",
        },
        "multiple_errors": {
            "title": "Data Anomaly",
            "message": "Multiple data anomalies detected ({stats}).",
            "suggestion": "Chart will be displayed excluding problematic data.",
        },
        "warning": {
            "title": "Data Quality Notice",
            "message": "Minor issues found in some data.",
            "suggestion": "Chart will be displayed normally but accuracy may be reduced.",
        },
    },
}


def resolve_locale(locale: Optional[str]) -> str:
    """Return a bundled locale for ``locale`` ("en-US" -> "en"; unknown -> default)."""
    if isinstance(locale, str) and locale:
        normalized = locale.strip().lower().replace("_", "-")
        if normalized in SUPPORTED_LOCALES:
            return normalized
        base = normalized.split("-", 1)[0]
        if base in SUPPORTED_LOCALES:
            return base
    _LOGGER.debug("Unsupported locale %r; falling back to %s", locale, DEFAULT_LOCALE)
    return DEFAULT_LOCALE


def messages_for(locale: Optional[str]) -> Dict[str, Dict[str, str]]:
    return MESSAGE_RESOURCES[resolve_locale(locale)]


def error_stats(error_count: int, locale: Optional[str]) -> str:
    """Short error count text, e.g. "3 errors" or "many errors"."""
    if resolve_locale(locale) == "en":
        if error_count >= MANY_ERRORS_THRESHOLD:
            return "many errors"
        return f"{error_count} error{'s' if error_count != 1 else ''}"
    if error_count >= MANY_ERRORS_THRESHOLD:
        return "多数のエラー"
    return f"{error_count}件のエラー"


def render(template: Dict[str, str], **values: Any) -> Dict[str, str]:
    return {key: text.format(**values) if values else text for key, text in template.items()}
