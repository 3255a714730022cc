from __future__ import annotations

import pytest

from src.hls_distribution.domain.models import Package
from src.hls_distribution.exceptions import ValidationError, ensure_found


def test_ensure_found_returns_record(package: Package) -> None:
    element = package.get_element("track-h264")

    assert ensure_found(element, entity="Element", identifier="track-h264") is element


def test_ensure_found_rejects_missing_record(package: Package) -> None:
    with pytest.raises(ValidationError, match="Element 'nope' not found"):
        ensure_found(package.get_element("nope"), entity="Element", identifier="nope")
