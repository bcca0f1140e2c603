"""Custom exceptions for catalog ingestion"""


class ParseError(Exception):
    """Base exception for parsing errors"""
    pass


class EmptyFileError(ParseError):
    """Raised when file is empty"""
    pass


class MalformedCSVError(ParseError):
    """Raised when CSV has inconsistent columns"""
    pass


class MissingColumnError(ParseError):
    """Raised when a required catalog column is absent"""
    pass


class UnsupportedFileTypeError(ParseError):
    """Raised when file type is not supported"""
    pass
