"""
Top-level package for the Serial Lookup API.

The HTTP service lives in ``serial_lookup_api.app``; the Google Sheets
values client shared by the data source and the access log lives in
``serial_lookup_api.sheets_client``.
"""

__all__ = []
