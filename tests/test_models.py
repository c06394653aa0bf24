from __future__ import annotations

import pytest

from componentkb.models import ComponentIdentity, GuidanceKind, normalize_component_name


@pytest.mark.parametrize(
    "name, key",
    [
        ("Text Field", "textfield"),
        ("text-field", "textfield"),
        ("  Site  Header ", "siteheader"),
        ("Complete Forms", "completeforms"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_component_name(name, key):
    assert normalize_component_name(name) == key


@pytest.mark.parametrize("name", ["Text Field", "Date-Picker", "MODAL dialog", "a - b - c"])
def test_normalization_is_idempotent(name):
    once = normalize_component_name(name)
    assert normalize_component_name(once) == once


def test_component_identity_from_name():
    identity = ComponentIdentity.from_name("Page Header")
    assert identity.name == "Page Header"
    assert identity.key == "pageheader"


def test_guidance_kinds_follow_display_order():
    ranks = [kind.rank for kind in GuidanceKind]
    assert ranks == sorted(ranks)
    assert GuidanceKind.WHEN_TO_USE.rank == 0
    assert GuidanceKind.NOTE.rank == len(GuidanceKind) - 1
