from __future__ import annotations

import pytest

from lockstep.services.release.semver import Version, parse_version


def test_parse_plain_version() -> None:
    assert parse_version("0.8.16") == Version(0, 8, 16)


@pytest.mark.parametrize(
    "text",
    ["v1.0.0", "1.0", "1.0.0-beta.1", "01.0.0", "1.0.0 ", "1.0.0\n", "\n1.0.0", "", "1.0.0.0", "x.y.z"],
)
def test_parse_rejects_non_strict_versions(text: str) -> None:
    assert parse_version(text) is None


def test_bumps_from_0_8_16() -> None:
    v = Version(0, 8, 16)
    assert str(v.bump("major")) == "1.0.0"
    assert str(v.bump("minor")) == "0.9.0"
    assert str(v.bump("patch")) == "0.8.17"


def test_bump_rejects_unknown_kind() -> None:
    with pytest.raises(AssertionError):
        Version(1, 0, 0).bump("build")  # type: ignore[arg-type]


def test_versions_order_numerically() -> None:
    assert Version(0, 10, 0) > Version(0, 9, 99)
    assert sorted([Version(1, 0, 0), Version(0, 1, 0)]) == [Version(0, 1, 0), Version(1, 0, 0)]
