"""Attendance Exception Portal package.

This package is organized by feature modules (requests, notifications,
statistics, ...) with a thin Flask controller layer over service/repository
layers backed by a key-value blob store.
"""
