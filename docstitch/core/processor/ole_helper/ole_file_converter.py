# docstitch/core/processor/ole_helper/ole_file_converter.py
"""
OLEFileConverter - OLE compound file opener

Opens binary DOC data as olefile.OleFileIO and wraps it in a
WordDocumentStream.
"""
from io import BytesIO
from typing import Optional

import olefile

from docstitch.core.functions.exceptions import DocumentParseError
from docstitch.core.functions.file_format import MAGIC_NUMBERS
from docstitch.core.processor.ole_helper.ole_word_stream import WordDocumentStream


class OLEFileConverter:
    """Converts binary OLE data to a readable Word document stream."""

    MAGIC_OLE = MAGIC_NUMBERS['OLE']

    def __init__(self, use_paragraph_properties: bool = True):
        self._use_paragraph_properties = use_paragraph_properties

    def open(self, file_data: bytes) -> olefile.OleFileIO:
        """
        Open binary OLE data.

        Raises:
            DocumentParseError: If the data is not a readable OLE file
        """
        if not file_data.startswith(self.MAGIC_OLE):
            raise DocumentParseError("Not a valid OLE file (magic header mismatch)")
        try:
            return olefile.OleFileIO(BytesIO(file_data))
        except OSError as e:
            raise DocumentParseError(f"Cannot open OLE file: {e}") from e

    def convert(self, file_data: bytes) -> WordDocumentStream:
        """
        Convert binary DOC data to a WordDocumentStream.

        The OLE file is fully read and closed before returning.

        Raises:
            DocumentParseError: If the data is not a readable Word document
        """
        ole = self.open(file_data)
        try:
            stream = WordDocumentStream(ole, self._use_paragraph_properties)
            stream.paragraphs()
            return stream
        finally:
            self.close(ole)

    def close(self, converted_object: Optional[olefile.OleFileIO]) -> None:
        if converted_object is not None:
            converted_object.close()


__all__ = ['OLEFileConverter']
