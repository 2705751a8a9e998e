from __future__ import annotations

import importlib

from dotenv import load_dotenv

from checkmate.database.bootstrap import apply_schema
from checkmate.database.connection import DBConfig, DatabaseConnection
from checkmate.settings import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))

    count = apply_schema(DatabaseConnection.get_instance(config), config.database)
    print(
        "OK: Applied schema.sql -> "
        f"{config.user}@{config.host}:{config.port}/{config.database} "
        f"(statements={count})"
    )


if __name__ == "__main__":
    main()
