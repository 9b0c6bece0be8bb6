"""
Backend package for the fitsocial API.

This package provides a FastAPI application over a relational store, gated by
Firebase ID tokens, plus a thin HTTP client mirroring the web frontend's API
wrappers.
"""
