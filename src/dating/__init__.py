# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Small dating web app: sign up, log in, edit a profile, browse other members."""

__version__ = "0.1.0"
