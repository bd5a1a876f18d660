"""Application settings."""

import os
from pathlib import Path

# Remote store
SPREADSHEET_ID = os.getenv("ELECTION_SPREADSHEET_ID", "")
SHEETS_API_URL = os.getenv("ELECTION_SHEETS_API_URL", "https://sheets.googleapis.com/v4/spreadsheets")
API_TIMEOUT = 30

# Client cache / retry
CACHE_TTL = float(os.getenv("ELECTION_CACHE_TTL", "0.8"))
RETRY_ATTEMPTS = 3
BACKOFF_MIN = 0.3
BACKOFF_MAX = 8.0
RETRY_AFTER_MAX = 30.0

# Logging
LOG_DIR = Path(os.getenv("ELECTION_LOG_DIR", "logs"))

# Election rules
SEATS_MUNICIPAL_TOTAL = int(os.getenv("ELECTION_SEATS_MUNICIPAL", "35"))
SEATS_COMMUNITY_TOTAL = int(os.getenv("ELECTION_SEATS_COMMUNITY", "7"))
SEATS_THRESHOLD_PCT = 5.0
RUNOFF_ADMISSION_PCT = 10.0
ABSOLUTE_MAJORITY_PCT = 50.0

ROUND1_DATE = os.getenv("ELECTION_ROUND1_DATE", "2026-03-15")
ROUND2_DATE = os.getenv("ELECTION_ROUND2_DATE", "2026-03-22")

# Hourly cumulative turnout columns, in sheet order
PARTICIPATION_HOURS = [f"{h:02d}h" for h in range(8, 21)]
