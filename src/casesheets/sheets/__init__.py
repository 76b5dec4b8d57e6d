from casesheets.sheets.auth import build_sheets_client, load_credentials
from casesheets.sheets.client import GoogleSheetsClient, SheetsClient, a1_range

__all__ = [
    "GoogleSheetsClient",
    "SheetsClient",
    "a1_range",
    "build_sheets_client",
    "load_credentials",
]
