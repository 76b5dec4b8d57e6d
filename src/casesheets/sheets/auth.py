import json
import logging
from typing import Optional

from google.oauth2 import service_account

from casesheets.config import SPREADSHEET_ID, Settings
from casesheets.exceptions import ConfigError
from casesheets.sheets.client import GoogleSheetsClient

logger = logging.getLogger(__name__)


def load_credentials(raw: Optional[str], scopes: list[str]) -> service_account.Credentials:
    """
    Parses the GOOGLE_CREDENTIALS blob into service-account credentials.
    Absent or malformed input is a startup error.
    """
    if not raw or not raw.strip():
        raise ConfigError("GOOGLE_CREDENTIALS is not set.")

    try:
        info = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"GOOGLE_CREDENTIALS is not valid JSON: {exc}") from exc

    if not isinstance(info, dict):
        raise ConfigError("GOOGLE_CREDENTIALS must be a JSON object.")

    try:
        return service_account.Credentials.from_service_account_info(info, scopes=scopes)
    except (ValueError, KeyError) as exc:
        raise ConfigError(f"GOOGLE_CREDENTIALS is not a service account key: {exc}") from exc


def build_sheets_client(settings: Settings) -> GoogleSheetsClient:
    creds = load_credentials(settings.google.credentials, settings.google.scopes)
    logger.info("Sheets client ready for %s", creds.service_account_email)
    return GoogleSheetsClient.from_credentials(
        SPREADSHEET_ID,
        creds,
        timeout=settings.google.timeout_seconds,
    )
