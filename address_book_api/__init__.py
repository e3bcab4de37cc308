"""
Top‑level package for the Address Book API.

This file makes ``address_book_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``address_book_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
