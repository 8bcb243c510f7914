"""Spreadsheet export of the current rate table."""

from __future__ import annotations

import io
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Union

from openpyxl import Workbook

from .models import FetchResult

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ("幣別", "代碼", "現鈔買入", "現鈔賣出", "即期買入", "即期賣出")
SHEET_TITLE = "富邦銀行匯率"
FILENAME_PREFIX = "富邦銀行匯率"


def export_filename(today: Optional[date] = None) -> str:
    """Return ``富邦銀行匯率_YYYY-MM-DD.xlsx`` for ``today``."""

    today = today or date.today()
    return f"{FILENAME_PREFIX}_{today.isoformat()}.xlsx"


def build_workbook(result: Optional[FetchResult]) -> Optional[bytes]:
    """Serialise ``result`` as a single-sheet ``.xlsx`` workbook.

    Returns ``None`` when there is no result yet or it has no rows, so
    callers never hand out an empty file.
    """

    if result is None or not result.rows:
        logger.info("Nothing to export: no exchange rate rows available")
        return None

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    sheet.append(EXPORT_COLUMNS)
    for record in result.rows:
        sheet.append(record.as_row())

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.info("Exported %s exchange rate rows", len(result.rows))
    return buffer.getvalue()


def export_to_file(
    result: Optional[FetchResult],
    directory: Union[str, Path] = ".",
    today: Optional[date] = None,
) -> Optional[Path]:
    """Write the workbook into ``directory``; no-op when nothing to export."""

    content = build_workbook(result)
    if content is None:
        return None

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(today)
    path.write_bytes(content)
    logger.info("Wrote spreadsheet to %s", path)
    return path
