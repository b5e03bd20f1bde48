"""
Tests for field-mask updates.
"""

import pytest

from vrcatalog.core.exceptions import FailedPreconditionException, InvalidArgumentException
from vrcatalog.services.update_engine import (
    apply_account_mask,
    apply_asset_mask,
    apply_format_replacement,
    resolve_mask,
    ASSET_IDENTITY_FIELDS,
    ASSET_MASK_PATHS,
)


class MockAsset:
    def __init__(self):
        self.id = "asset-1"
        self.display_name = "Old name"
        self.description = "Old description"
        self.tags = ["old"]
        self.thumbnail_ids = ["thumb-1"]
        self.formats = [{"root_id": "el-1", "resource_ids": [], "format_type": "GLTF2"}]


class MockPatch:
    def __init__(self, display_name="", description="", tags=None):
        self.display_name = display_name
        self.description = description
        self.tags = tags or []


class MockAccount:
    def __init__(self):
        self.id = "alice"
        self.description = ""


class TestResolveMask:
    """Tests for mask path resolution."""

    def test_aliases_map_to_fields(self):
        fields = resolve_mask(["name", "tag"], ASSET_MASK_PATHS, ASSET_IDENTITY_FIELDS, "asset")
        assert fields == ["display_name", "tags"]

    def test_wildcard_selects_everything(self):
        fields = resolve_mask(["*"], ASSET_MASK_PATHS, ASSET_IDENTITY_FIELDS, "asset")
        assert set(fields) == {"display_name", "description", "tags"}

    def test_repeated_paths_collapse(self):
        fields = resolve_mask(["name", "display_name", "*"], ASSET_MASK_PATHS, ASSET_IDENTITY_FIELDS, "asset")
        assert len(fields) == 3

    @pytest.mark.parametrize("path", ["owner_id", "create_time", "asset_id"])
    def test_identity_fields_fail_precondition(self, path):
        with pytest.raises(FailedPreconditionException):
            resolve_mask([path], ASSET_MASK_PATHS, ASSET_IDENTITY_FIELDS, "asset")

    @pytest.mark.parametrize("path", ["access_level", "formats", "license", "bogus"])
    def test_other_fields_are_invalid(self, path):
        with pytest.raises(InvalidArgumentException):
            resolve_mask([path], ASSET_MASK_PATHS, ASSET_IDENTITY_FIELDS, "asset")


class TestApplyAssetMask:
    """Tests for masked asset metadata updates."""

    def test_description_only_mask(self):
        asset = MockAsset()
        patch = MockPatch(display_name="New name", description="New description", tags=["new"])

        changed = apply_asset_mask(asset, patch, ["description"])

        assert changed == {"description"}
        assert asset.description == "New description"
        assert asset.display_name == "Old name"
        assert asset.tags == ["old"]

    def test_masked_empty_value_clears_field(self):
        asset = MockAsset()
        apply_asset_mask(asset, MockPatch(), ["description", "tags"])

        assert asset.description == ""
        assert asset.tags == []

    def test_tags_are_deduplicated(self):
        asset = MockAsset()
        apply_asset_mask(asset, MockPatch(tags=["a", "b", "a"]), ["tags"])
        assert asset.tags == ["a", "b"]

    def test_reapplying_changes_nothing(self):
        asset = MockAsset()
        patch = MockPatch(display_name="New", description="Desc", tags=["x"])

        first = apply_asset_mask(asset, patch, ["*"])
        second = apply_asset_mask(asset, patch, ["*"])

        assert first == {"display_name", "description", "tags"}
        assert second == set()

    def test_invalid_path_leaves_asset_untouched(self):
        asset = MockAsset()
        with pytest.raises(InvalidArgumentException):
            apply_asset_mask(asset, MockPatch(display_name="New"), ["name", "access_level"])
        assert asset.display_name == "Old name"

    def test_empty_mask_is_rejected(self):
        with pytest.raises(InvalidArgumentException):
            apply_asset_mask(MockAsset(), MockPatch(), [])

    def test_thumbnail_without_mask(self):
        asset = MockAsset()
        changed = apply_asset_mask(asset, MockPatch(), [], new_thumbnail_id="thumb-2")

        assert changed == {"thumbnail_ids"}
        assert asset.thumbnail_ids == ["thumb-2"]


class TestApplyAccountMask:
    """Tests for masked account updates."""

    def test_description_update(self):
        account = MockAccount()
        assert apply_account_mask(account, MockPatch(description="Hi"), ["description"]) == {"description"}
        assert account.description == "Hi"

    def test_display_name_is_not_writable(self):
        with pytest.raises(InvalidArgumentException):
            apply_account_mask(MockAccount(), MockPatch(display_name="X"), ["display_name"])

    def test_account_id_is_immutable(self):
        with pytest.raises(FailedPreconditionException):
            apply_account_mask(MockAccount(), MockPatch(), ["account_id"])


class TestApplyFormatReplacement:
    """Tests for format replacement."""

    def test_same_formats_is_a_no_op(self):
        asset = MockAsset()
        formats = [dict(fmt) for fmt in asset.formats]

        assert apply_format_replacement(asset, formats) == set()

    def test_thumbnails_kept_when_not_given(self):
        asset = MockAsset()
        new_formats = [{"root_id": "el-2", "resource_ids": [], "format_type": "GLB"}]

        changed = apply_format_replacement(asset, new_formats)

        assert changed == {"formats"}
        assert asset.thumbnail_ids == ["thumb-1"]

    def test_thumbnails_replaced_when_given(self):
        asset = MockAsset()
        changed = apply_format_replacement(asset, asset.formats, ["thumb-9"])

        assert changed == {"thumbnail_ids"}
        assert asset.thumbnail_ids == ["thumb-9"]
