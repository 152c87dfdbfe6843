# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Integration tests for locale redirect tables.

This package contains end-to-end tests that run the service and the CLI
against a temporary content tree on disk.
"""
