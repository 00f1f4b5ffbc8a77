"""Shared domain, HTTP client and services for the comandas frontend."""
