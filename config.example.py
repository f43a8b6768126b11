# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real keys. Put them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "DAYLIST_APP_NAME": "App display name (default: daylist).",
    "DAYLIST_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "DAYLIST_DATA_DIR": "Local data directory for daylist.log (default: .local/daylist).",
    # Backend
    "DAYLIST_SUPABASE_URL": "Project URL, e.g. https://<ref>.supabase.co (fallback: SUPABASE_URL).",
    "DAYLIST_SUPABASE_ANON_KEY": "Public anon key of the project (fallback: SUPABASE_ANON_KEY).",
    "DAYLIST_REQUEST_TIMEOUT": "Per-request timeout in seconds (default: 15, minimum: 1).",
}
