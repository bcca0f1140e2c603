"""CSV file parser with auto-detection capabilities"""
import logging
from pathlib import Path

import chardet
import polars as pl

from retail_insights.ingestion.base_parser import BaseParser, ParsedDataFrame
from retail_insights.ingestion.exceptions import EmptyFileError, MalformedCSVError, ParseError

logger = logging.getLogger(__name__)

NULL_VALUES = ["", "NULL", "null", "NA", "N/A", "n/a"]


class CSVParser(BaseParser):
    """Parser for catalog CSV files with encoding and delimiter detection.

    Every column is read as text; typing is left to the catalog mapper so
    pack size labels such as "500" are never turned into numbers here.
    """

    file_types = ("csv",)

    def parse(self, file_path: str) -> ParsedDataFrame:
        """Parse CSV file and return DataFrame with metadata"""
        logger.info(f"Parsing CSV file: {file_path}")

        if Path(file_path).stat().st_size == 0:
            raise EmptyFileError("CSV file is empty")

        encoding = self.detect_encoding(file_path)
        logger.info(f"Detected encoding: {encoding}")

        # Read sample for delimiter detection
        try:
            with open(file_path, 'r', encoding=encoding, errors='replace') as f:
                sample = ''.join([f.readline() for _ in range(5)])
        except (OSError, LookupError) as e:
            raise ParseError(f"Failed to read file: {str(e)}") from e

        if not sample.strip():
            raise EmptyFileError("CSV file contains no data")

        delimiter = self.detect_delimiter(sample)
        logger.info(f"Detected delimiter: {repr(delimiter)}")

        try:
            df = self._read(file_path, delimiter, encoding)
        except Exception as e:
            if self._is_malformed(e):
                raise MalformedCSVError(f"Inconsistent column count in CSV: {str(e)}") from e
            # Try alternative encodings
            for alt_encoding in ['utf-8', 'iso-8859-1', 'windows-1252']:
                if alt_encoding == encoding:
                    continue
                try:
                    logger.info(f"Retrying with encoding: {alt_encoding}")
                    df = self._read(file_path, delimiter, alt_encoding)
                    encoding = alt_encoding
                    break
                except Exception:
                    continue
            else:
                raise ParseError(f"Failed to parse CSV with any encoding: {str(e)}") from e

        df = self.clean_data(df)

        if df.height == 0:
            raise EmptyFileError("CSV file contains no valid data rows")

        metadata = {
            "filename": Path(file_path).name,
            "encoding": encoding,
            "delimiter": delimiter,
            "rows": df.height,
            "columns": df.width,
            "headers": df.columns,
        }

        logger.info(f"Successfully parsed {metadata['rows']} rows, {metadata['columns']} columns")

        return ParsedDataFrame(data=df, metadata=metadata)

    @staticmethod
    def _is_malformed(error: Exception) -> bool:
        message = str(error).lower()
        return isinstance(error, pl.exceptions.ComputeError) and (
            "could not parse" in message or "found more fields" in message
        )

    def _read(self, file_path: str, delimiter: str, encoding: str) -> pl.DataFrame:
        # polars decodes utf8 only; other encodings are transcoded first
        if encoding.lower().replace('-', '') in ('utf8', 'ascii'):
            return pl.read_csv(
                file_path,
                separator=delimiter,
                encoding='utf8',
                infer_schema_length=0,
                null_values=NULL_VALUES,
            )
        with open(file_path, 'r', encoding=encoding) as f:
            content = f.read().encode('utf-8')
        return pl.read_csv(
            content,
            separator=delimiter,
            infer_schema_length=0,
            null_values=NULL_VALUES,
        )

    def detect_delimiter(self, sample: str) -> str:
        """Detect the most likely delimiter from sample text"""
        delimiters = {
            ',': 0,
            ';': 0,
            '\t': 0,
            '|': 0
        }

        lines = sample.strip().split('\n')
        if not lines:
            return ','

        for line in lines[:5]:
            for delim in delimiters:
                delimiters[delim] += line.count(delim)

        max_delim = max(delimiters, key=delimiters.get)

        if delimiters[max_delim] == 0:
            logger.warning("No delimiter detected, defaulting to comma")
            return ','

        return max_delim

    def detect_encoding(self, file_path: str) -> str:
        """Detect file encoding using chardet"""
        try:
            with open(file_path, 'rb') as f:
                raw_data = f.read(10000)  # Read first 10KB

            result = chardet.detect(raw_data)
            encoding = result['encoding']
            confidence = result['confidence']

            logger.info(f"Encoding detection: {encoding} (confidence: {confidence:.2f})")

            if confidence < 0.7:
                logger.warning(f"Low confidence ({confidence:.2f}), defaulting to UTF-8")
                return 'utf-8'

            return encoding if encoding else 'utf-8'

        except OSError as e:
            logger.warning(f"Encoding detection failed: {e}, defaulting to UTF-8")
            return 'utf-8'

    def clean_data(self, df: pl.DataFrame) -> pl.DataFrame:
        """Drop all-null rows and strip whitespace from text columns"""
        logger.info("Cleaning data")

        df = df.filter(~pl.all_horizontal(pl.all().is_null()))

        for col in df.columns:
            if df[col].dtype == pl.Utf8:
                df = df.with_columns(
                    pl.col(col).str.strip_chars().alias(col)
                )

        logger.info(f"Cleaned data: {df.height} rows remaining")
        return df
