# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Tests for the resource map."""

import pytest

from testpipe.resource_map import ResourceMap


class TestResourceMap:
    """Tests for ResourceMap."""

    def test_lookup(self):
        """Behaves like a read-only mapping."""
        resource_map = ResourceMap({"a": "/a", "b": "/b"})
        assert resource_map["a"] == "/a"
        assert resource_map.get("missing") is None
        assert len(resource_map) == 2
        assert set(resource_map) == {"a", "b"}

    def test_empty(self):
        """No paths means an empty, falsy map."""
        assert not ResourceMap()
        assert len(ResourceMap(None)) == 0

    def test_is_immutable(self):
        """Item assignment is not supported."""
        resource_map = ResourceMap({"a": "/a"})
        with pytest.raises(TypeError):
            resource_map["b"] = "/b"

    def test_source_dict_changes_do_not_leak(self):
        """The map copies its input."""
        paths = {"a": "/a"}
        resource_map = ResourceMap(paths)
        paths["b"] = "/b"
        assert "b" not in resource_map

    def test_with_alias_returns_new_map(self):
        """with_alias leaves the original map untouched."""
        resource_map = ResourceMap({"some-resource": "/some"})
        aliased = resource_map.with_alias("a-resource", "some-resource")
        assert aliased["a-resource"] == "/some"
        assert "a-resource" not in resource_map
