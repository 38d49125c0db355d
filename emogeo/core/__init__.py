# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for the emotional geometry engine.

This package contains the core logic and shared utilities:
- config: Application configuration and settings
- emotional: Geometry, classification, trends, text signals and protocol selection
"""
