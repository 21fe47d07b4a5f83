"""Helper to create a Supabase client when credentials are provided."""

from __future__ import annotations

import os


def create_supabase_client():  # pragma: no cover - needs live credentials
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and a Supabase key must be configured")

    from supabase import create_client

    return create_client(url, key)
