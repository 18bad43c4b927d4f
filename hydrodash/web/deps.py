from __future__ import annotations

import secrets

from fastapi import Request

VIEW_ID_KEY = "view_id"
DEFAULT_LOCALE = "en"


def ensure_view_id(request: Request) -> str:
    view_id = request.session.get(VIEW_ID_KEY)
    if not isinstance(view_id, str) or not view_id:
        view_id = secrets.token_urlsafe(16)
        request.session[VIEW_ID_KEY] = view_id
    return view_id


def get_view_id(request: Request) -> str | None:
    view_id = request.session.get(VIEW_ID_KEY)
    if not isinstance(view_id, str) or not view_id:
        return None
    return view_id


def detect_locale(request: Request) -> str:
    header = request.headers.get("accept-language", "")
    lang = header.split(",", 1)[0].strip()[:2].lower()
    if len(lang) == 2 and lang.isalpha():
        return lang
    return DEFAULT_LOCALE
