# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Static checks for pipeline-as-code definitions."""

__version__ = "0.3.0"
