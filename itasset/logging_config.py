from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_app_logging(level: str = "INFO") -> None:
    """
    Logging setup for the itasset package.

    Notes:
    - stdlib logging; every module logs through ``logging.getLogger(__name__)``.
    - Under uvicorn the root handlers already exist; a bare ``python -m`` run gets a stream handler.
    - `APP_LOG_LEVEL=DEBUG` shows per-request scope resolution and SQL from SQLAlchemy.
    - Tokens and passwords are never logged; user ids and permission names are.
    """

    normalized = level.upper()
    if not logging.getLogger().handlers:
        logging.basicConfig(format=_FORMAT)

    package_logger = logging.getLogger("itasset")
    package_logger.setLevel(normalized)
    package_logger.propagate = True

    sql_level = logging.INFO if normalized == "DEBUG" else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
