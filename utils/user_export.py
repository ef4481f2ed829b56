"""
CSV export of signed-up users (email + signup date).
"""

import csv
import io
from datetime import datetime

CSV_HEADERS = ["Email", "Signup Date"]
EXCEL_BOM = "\ufeff"


def format_signup_date(iso_date: str | None) -> str:
    """
    Formats an ISO timestamp as MM/DD/YYYY, HH:MM:SS AM/PM.
    Unparseable values are returned unchanged.
    """
    if not iso_date:
        return ""
    try:
        moment = datetime.fromisoformat(iso_date)
    except ValueError:
        return iso_date
    return moment.strftime("%m/%d/%Y, %I:%M:%S %p")


def generate_csv(users: list[tuple[str, str]]) -> str:
    """Builds CSV text with every field quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(CSV_HEADERS) + "\n")
    for email, created_at in users:
        writer.writerow([email, format_signup_date(created_at)])
    return buffer.getvalue().rstrip("\n")


def generate_excel_csv(users: list[tuple[str, str]]) -> bytes:
    """Same CSV, UTF-8 with a BOM so Excel detects the encoding."""
    return (EXCEL_BOM + generate_csv(users)).encode("utf-8")
