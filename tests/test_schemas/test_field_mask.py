"""
Tests for update mask parsing in request schemas.
"""

import pytest

from vrcatalog.schemas.account import AccountUpdateRequest
from vrcatalog.schemas.asset import AssetUpdateRequest
from vrcatalog.schemas.field_mask import parse_field_mask


def test_comma_string_is_split_and_trimmed():
    assert parse_field_mask(" name, description ,,tags ") == ["name", "description", "tags"]


def test_list_is_passed_through():
    assert parse_field_mask(["name"]) == ["name"]


@pytest.mark.parametrize("model", [AccountUpdateRequest, AssetUpdateRequest])
def test_request_schemas_accept_both_forms(model):
    from_string = model.model_validate({"updateMask": "description, *"})
    from_list = model.model_validate({"updateMask": ["description", "*"]})

    assert from_string.update_mask == from_list.update_mask == ["description", "*"]
