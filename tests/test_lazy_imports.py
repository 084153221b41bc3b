"""Tests for figway.__init__ — lazy exports cover all public names."""

import pytest

import figway


@pytest.mark.parametrize("name", figway.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(figway, name)
    assert obj is not None, f"figway.{name} resolved to None"


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        figway.__getattr__("ThisDoesNotExist")
