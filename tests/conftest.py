from pathlib import Path

import pytest

# Test layer directory -> markers applied to every test collected from it
LAYER_MARKERS = {
    "domain": ("domain",),
    "application": ("application",),
    "integration": ("integration", "slow"),
    "bdd": ("bdd", "slow"),
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="PROTEAN_ENV overlay of billing/domain.toml to run the suite against",
    )


def pytest_collection_modifyitems(config, items):
    """Mark billing tests by the layer directory they live in.

    Tests explicitly marked ``fast`` are never marked ``slow``.
    """
    for item in items:
        parts = Path(str(item.fspath)).parts
        layer = next((part for part in parts if part in LAYER_MARKERS), None)
        if layer is None:
            continue

        for marker in LAYER_MARKERS[layer]:
            if marker == "slow" and item.get_closest_marker("fast"):
                continue
            item.add_marker(getattr(pytest.mark, marker))
