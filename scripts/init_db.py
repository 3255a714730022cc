"""Create the distribution job table in the configured database."""

from src.hls_distribution.core.config import AppConfig
from src.hls_distribution.db import build_engine, init_db


def main() -> None:
    config = AppConfig.build_default()
    engine = build_engine(config.database_url)
    init_db(engine)
    engine.dispose()
    print(f"Database initialized at {config.database_url}.")


if __name__ == "__main__":
    main()
