import httpx
import pytest
from httpx import ASGITransport

from hrflow.api.core.container import Container, get_container
from hrflow.app.main import app

from tests.fixtures.candidate_directory_stub import candidate_directory
from tests.fixtures.fake_clock import FakeClock


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def container():
    container = Container(candidates=candidate_directory(), clock=FakeClock())
    app.dependency_overrides[get_container] = lambda: container
    yield container
    app.dependency_overrides.clear()


@pytest.fixture
async def client(container):
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url='http://test') as client:
        yield client
