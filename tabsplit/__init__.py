"""Split a group bill from spoken orders and a scanned receipt."""

__version__ = "0.1.0"
