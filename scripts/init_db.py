from __future__ import annotations

import importlib

from geo_attendance.config import get_settings_module
from geo_attendance.database.bootstrap import ensure_kv_table, list_tables


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_kv_table(db_config)
    tables = list_tables(db_config)
    print(
        "OK: kv_store ready -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
