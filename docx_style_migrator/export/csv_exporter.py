"""
CSV exporter for style listings.

Writes the ``styleId,name,type`` table produced by a style listing.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Union

from ..models.style import StyleInfo

logger = logging.getLogger(__name__)

CSV_HEADER = ("styleId", "name", "type")


class StyleCSVExporter:
    """
    Exports a style listing to CSV.

    Fields containing a quote, comma or line break are quoted with inner
    quotes doubled; everything else is written bare.
    """

    def __init__(self, styles: Iterable[StyleInfo], include_headers: bool = True):
        """
        Initialize CSV exporter.

        Args:
            styles: Style rows in output order
            include_headers: Whether to write the header row
        """
        self.styles: List[StyleInfo] = list(styles)
        self.include_headers = include_headers

    def _write(self, handle) -> None:
        writer = csv.writer(handle, delimiter=",", quotechar='"', quoting=csv.QUOTE_MINIMAL,
                            lineterminator="\n")
        if self.include_headers:
            writer.writerow(CSV_HEADER)
        for info in self.styles:
            writer.writerow((info.style_id, info.name, info.type))

    def export_to_string(self) -> str:
        """
        Export styles to a CSV string.

        Returns:
            CSV content as string
        """
        output = io.StringIO()
        self._write(output)
        return output.getvalue()

    def export_to_file(self, file_path: Union[str, Path]) -> Path:
        """
        Export styles to a UTF-8 CSV file.

        Args:
            file_path: Output path

        Returns:
            Output path
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8", newline="") as handle:
            self._write(handle)
        logger.info(f"Exported {len(self.styles)} styles to {file_path}")
        return file_path


def read_styles_csv(text: str) -> List[StyleInfo]:
    """Parse CSV produced by StyleCSVExporter back into style rows."""
    rows = list(csv.reader(io.StringIO(text)))
    if rows and tuple(rows[0]) == CSV_HEADER:
        rows = rows[1:]
    return [StyleInfo(*row) for row in rows if len(row) == 3]
