import os
from collections.abc import Iterator

import pytest

# Environment variables read by nightscore.config.load_settings
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "nightscore")

CONFIG_KEYS = (
    "TIME_ZONE",
    "LOOKBACK_DAYS",
    "SCORING_POLICY",
    "SNAPSHOT_DB_PATH",
    "SNAPSHOT_FRESHNESS_SECS",
    "SAMPLES_PATH",
    "USE_SAMPLE_DATA",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    # Keep settings deterministic regardless of the developer's shell
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)
    # load_settings() must not pick up a stray .env from the working directory
    monkeypatch.setattr("nightscore.config.load_dotenv", lambda *_a, **_k: False)
    yield
