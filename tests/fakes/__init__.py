# SPDX-License-Identifier: Apache-2.0
"""Test doubles and sample handler classes."""
