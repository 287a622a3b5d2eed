"""CSV rendering for the spreadsheet downloads."""

import csv
import io
import re
import unicodedata
from collections.abc import Iterable, Sequence
from typing import Any

from fastapi.responses import Response

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def render_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """Render a header row and data rows as CSV text.

    ``None`` cells are written as empty strings.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])
    return buffer.getvalue()


def safe_filename_part(value: str) -> str:
    """Make a value usable in a download file name.

    Accents are folded to ASCII and whitespace runs become underscores.
    """
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    return re.sub(r"\s+", "_", ascii_value.strip())


def csv_response(content: str, filename: str) -> Response:
    """Wrap CSV text in a download response."""
    return Response(
        content=content.encode("utf-8"),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
