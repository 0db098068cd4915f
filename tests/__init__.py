"""
Test suite for docx_style_migrator.

Shared document builders live in ``tests.builders``; fixtures in ``conftest.py``.
"""
