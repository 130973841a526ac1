"""DuckDB schema for persisted application state.

Tables are rewritten wholesale on every save, so ids carry no key
constraint; ``sort_order`` preserves list order.
"""

CREATE_SHEETS_TABLE = """
    CREATE TABLE IF NOT EXISTS sheets (
        id VARCHAR NOT NULL,
        sort_order INTEGER NOT NULL,
        name VARCHAR NOT NULL,
        source VARCHAR NOT NULL,
        row_count INTEGER,
        payload JSON NOT NULL,
        saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

CREATE_SEARCH_HISTORY_TABLE = """
    CREATE TABLE IF NOT EXISTS search_history (
        id VARCHAR NOT NULL,
        sort_order INTEGER NOT NULL,
        query VARCHAR NOT NULL,
        timestamp_ms BIGINT NOT NULL,
        results_count INTEGER
    )
"""

CREATE_SAVED_SEARCHES_TABLE = """
    CREATE TABLE IF NOT EXISTS saved_searches (
        id VARCHAR NOT NULL,
        sort_order INTEGER NOT NULL,
        name VARCHAR NOT NULL,
        query VARCHAR NOT NULL,
        filters JSON,
        created_at BIGINT NOT NULL
    )
"""

CREATE_WORKSPACES_TABLE = """
    CREATE TABLE IF NOT EXISTS workspaces (
        id VARCHAR NOT NULL,
        sort_order INTEGER NOT NULL,
        name VARCHAR NOT NULL,
        urls JSON NOT NULL,
        created_at BIGINT NOT NULL,
        last_used BIGINT NOT NULL
    )
"""

CREATE_SETTINGS_TABLE = """
    CREATE TABLE IF NOT EXISTS settings (
        key VARCHAR NOT NULL,
        value JSON NOT NULL
    )
"""

ALL_TABLES = [
    CREATE_SHEETS_TABLE,
    CREATE_SEARCH_HISTORY_TABLE,
    CREATE_SAVED_SEARCHES_TABLE,
    CREATE_WORKSPACES_TABLE,
    CREATE_SETTINGS_TABLE,
]

STATE_TABLES = ["sheets", "search_history", "saved_searches", "workspaces", "settings"]
