import os
import tempfile
from pathlib import Path

# Keep test runs away from a developer's real session file and .env overrides
os.environ.setdefault(
    "NEWS_ALERTS_SESSION_FILE",
    str(Path(tempfile.gettempdir()) / "news_alerts_test" / "session.json")
)
os.environ.setdefault("NEWS_ALERTS_API_URL", "http://alerts.test")
os.environ.setdefault("NEWS_ALERTS_RETRY_BASE_DELAY", "0")
os.environ.setdefault("TESTING", "1")
