"""Blank connection table template."""

import csv
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

TEMPLATE_HEADERS = (
    "接続元ID(自動: カンマ区切り)",
    "ID（自動）",
    "ID（選択）",
    "機器名",
    "IPアドレス",
    "VLANID(数字のみ:例 1,10)複数非対応",
    "備考",
    "接続元1(選択)",
    "接続元2(選択)",
    "接続元3(選択)",
)


def write_template(output_path: str | Path, overwrite: bool = False) -> Path:
    """Write an empty connection table with the expected header row.

    The file is UTF-8 with a BOM so spreadsheet applications pick the right
    encoding when opening it.

    Raises:
        FileExistsError: ``output_path`` exists and ``overwrite`` is False.
    """
    output_path = Path(output_path)
    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Template already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8-sig", newline="") as f:
        csv.writer(f).writerow(TEMPLATE_HEADERS)

    logger.info(f"Wrote template to {output_path}")
    return output_path
