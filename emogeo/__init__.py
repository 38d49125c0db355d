"""Emotional Geometry Engine.

Turns self-reported emotion intensities, biometrics and chat messages into
geometry features, a severity classification, short-term trends and a
structured directive for a conversational support agent.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "0.1.0"
