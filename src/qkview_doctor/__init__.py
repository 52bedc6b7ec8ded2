"""qkview-doctor: offline diagnostics for F5 BigIP qkview archives."""

__version__ = "0.1.0"
