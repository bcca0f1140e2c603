"""Base parser interface for catalog files"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Tuple

import polars as pl


@dataclass
class ParsedDataFrame:
    """Raw catalog rows, all text, plus what the parser detected"""
    data: pl.DataFrame
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def headers(self) -> List[str]:
        return self.data.columns

    @property
    def row_count(self) -> int:
        return self.data.height


class BaseParser(ABC):
    """A parser reads one file format into an all-text frame.

    Typing and column mapping happen later so every format yields the
    same raw shape.
    """

    file_types: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def handles(cls, file_type: str) -> bool:
        return file_type.lower().lstrip('.') in cls.file_types

    @abstractmethod
    def parse(self, file_path: str) -> ParsedDataFrame:
        """Parse file and return DataFrame with metadata"""
