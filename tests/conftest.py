import pytest

from m2d2.assets import AssetLoader
from m2d2.themes import resolve


@pytest.fixture
def theme():
    return resolve("clockwork")


@pytest.fixture
def renewcorp():
    return resolve("renewcorp")


@pytest.fixture
def no_assets(tmp_path):
    """Loader rooted in an empty directory: every theme asset is absent."""
    return AssetLoader(tmp_path)
