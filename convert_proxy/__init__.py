"""
PDF.co conversion proxy.

This package forwards batches of uploaded files to the PDF.co conversion
API, choosing endpoints by MIME type and output format and falling back
through upload and format cascades when the provider rejects a request.
"""

__version__ = "1.0.0"
