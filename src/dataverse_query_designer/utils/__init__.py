# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Internal pandas and spreadsheet helpers used by query exports.
"""

__all__ = []
