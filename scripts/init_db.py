"""Create the reviewhub schema against DATABASE_URL and exit."""

from __future__ import annotations

from reviewhub.core.config import get_settings
from reviewhub.storage.bootstrap import bootstrap_schema
from reviewhub.storage.db import test_connection


def main() -> None:
    ok, error = test_connection()
    if not ok:
        raise SystemExit(f"database unreachable: {error}")

    tables = bootstrap_schema()
    print(f"env={get_settings().env} tables={','.join(tables)}")


if __name__ == "__main__":
    main()
