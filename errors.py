"""
Exceptions raised by QuickInvoice operations
"""
from __future__ import annotations


class QuickInvoiceError(Exception):
    """Base class for recoverable application errors"""


class ValidationError(QuickInvoiceError, ValueError):
    """User input rejected before any state was touched"""


class StorageError(QuickInvoiceError):
    """Reading or writing a persisted record failed"""


class ExportError(QuickInvoiceError):
    """Spreadsheet could not be written"""
