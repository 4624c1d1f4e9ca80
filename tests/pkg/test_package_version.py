import pytest

import routeguard


def test_version_is_a_non_empty_string():
    assert isinstance(routeguard.__version__, str) and routeguard.__version__


def test_version_comes_from_distribution_metadata(monkeypatch):
    asked = []
    monkeypatch.setattr(routeguard, "version", lambda dist: asked.append(dist) or "2.4.0")
    assert routeguard._detect_version() == "2.4.0"
    assert asked == ["routeguard"]


@pytest.mark.parametrize("broken", ["not-installed", "no-metadata-api"])
def test_version_falls_back_when_metadata_is_unavailable(monkeypatch, broken):
    if broken == "not-installed":

        def missing(dist):
            raise routeguard.PackageNotFoundError(dist)

        monkeypatch.setattr(routeguard, "version", missing)
    else:
        monkeypatch.setattr(routeguard, "version", None)
    assert routeguard._detect_version() == "0.1.0"
