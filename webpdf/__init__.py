"""WebPDF - render web pages to downloadable PDF documents."""

__version__ = "0.1.0"
