import pytest

from bazaar.infrastructure.bootstrap import build_container
from bazaar.infrastructure.settings import Settings


@pytest.fixture()
def settings(tmp_path):
    return Settings(env="test", data_dir=tmp_path / "data", webhook_secret="whsec_test", cache_ttl=60)


@pytest.fixture()
def container(settings):
    return build_container(settings)
