import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from memorials.api import ALL_ROUTERS, register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    for router in ALL_ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)
