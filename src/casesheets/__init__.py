"""Google Sheets backed case table API."""
