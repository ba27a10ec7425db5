"""Attendance Report package.

This package is organized by feature modules (attendance, report, feishu, ...)
with a thin Flask controller layer on top of plain service/strategy layers.
"""
