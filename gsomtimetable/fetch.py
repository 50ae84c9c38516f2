from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import requests

from gsomtimetable.errors import ScheduleFileError
from gsomtimetable.parse import is_valid_schedule_file_name

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Paths & URLs
# ---------------------------------------------------------------------------

PACKAGE_DIR = Path(__file__).resolve().parent
RAW_DIR = PACKAGE_DIR / "data" / "raw"

# Legacy files are published as static assets under /data of the site
DEFAULT_BASE_URL = "http://localhost:3000/data"
BASE_URL_ENV = "GSOMTIMETABLE_FILES_URL"

TIMEOUT_SECONDS = 30


def base_url() -> str:
    return os.environ.get(BASE_URL_ENV, DEFAULT_BASE_URL).rstrip("/")


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def fetch_schedule_file(file_name: str, base: Optional[str] = None) -> str:
    """
    Download one legacy schedule file and return its text.

    The file name is validated before any request is made, so only
    "[ru-]schedule-<yy>-<group>.txt" can ever be requested.
    """
    if not is_valid_schedule_file_name(file_name):
        raise ScheduleFileError(f"Invalid file name format: {file_name!r}")

    url = f"{(base or base_url()).rstrip('/')}/{file_name}"
    logger.info("Fetching %s", url)

    try:
        resp = requests.get(url, timeout=TIMEOUT_SECONDS, headers={"Cache-Control": "no-cache"})
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise ScheduleFileError(f"Failed to fetch {file_name}: {exc}") from exc

    # Files are always UTF-8, servers often omit the charset
    resp.encoding = "utf-8"
    return resp.text


def download_schedule_file(
    file_name: str,
    out_dir: Optional[Path] = None,
    base: Optional[str] = None,
    refresh: bool = False,
) -> Path:
    """
    Fetch a schedule file and cache it in data/raw/.

    An already cached file is reused unless refresh is set.
    """
    if not is_valid_schedule_file_name(file_name):
        raise ScheduleFileError(f"Invalid file name format: {file_name!r}")

    target_dir = out_dir if out_dir is not None else RAW_DIR
    out_file = target_dir / file_name

    if out_file.exists() and not refresh:
        logger.info("Using cached %s", out_file)
        return out_file

    text = fetch_schedule_file(file_name, base=base)
    target_dir.mkdir(parents=True, exist_ok=True)
    out_file.write_text(text, encoding="utf-8")
    return out_file
