"""Constants for tests."""

from __future__ import annotations

__all__ = ["TEST_IMAGE", "TEST_NAMESPACE"]

TEST_IMAGE = "registry.example.com/rhscl/httpd-24-rhel7:2.4-217"
"""Image registered with the mock OpenShift image API."""

TEST_NAMESPACE = "ocphelpers-test"
"""Namespace used for image streams in tests."""
