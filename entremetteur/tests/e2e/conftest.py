"""
Fixtures running the full application in-process.
"""

import pytest
from fastapi.testclient import TestClient

from entremetteur.di import Container
from entremetteur.main import EntremetteurApp
from entremetteur.presentation.api.dependencies import set_container


@pytest.fixture
def app_factory(reporter, clock):
    """Build an EntremetteurApp on the fake clock, without signal handlers."""

    def _build(settings):
        container = Container(settings, reporter=reporter, clock=clock)
        return EntremetteurApp(
            settings, container=container, install_signal_handlers=False
        )

    yield _build
    set_container(None)


@pytest.fixture
def app(app_factory, test_settings):
    return app_factory(test_settings)


@pytest.fixture
def client(app):
    with TestClient(app.app) as test_client:
        yield test_client
