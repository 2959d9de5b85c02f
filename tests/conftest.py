import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before any test module imports the domain."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _memorials_domain(request):
    """Initialize the memorials domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from memorials.domain import memorials

    memorials.init()
    return memorials


@pytest.fixture(scope="session", autouse=True)
def setup_db(_memorials_domain):
    from memorials.utils.db import drop_db, setup_db

    setup_db(_memorials_domain)

    yield

    drop_db(_memorials_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_memorials_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _memorials_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture(autouse=True)
def gateway():
    """A fresh FakeGateway for every test, installed as the process-wide gateway."""
    from memorials.gateway import set_gateway, shutdown_gateway
    from memorials.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)

    yield fake

    shutdown_gateway()


# ---------------------------------------------------------------------------
# Catalogue and obituary fixtures shared by the checkout tests
# ---------------------------------------------------------------------------
@pytest.fixture()
def memorial_tree(run_around_tests):
    """A Memorial Tree with a $39.95 "Single Tree" variant and 10 in stock."""
    from protean.utils.globals import current_domain

    from memorials.product.product import Product

    product = Product.create(
        sku="TREE-MEMORIAL",
        name="Memorial Tree",
        product_type="tree",
        stock_quantity=10,
        variants=[
            {"name": "Single Tree", "price": 39.95, "sku": "TREE-1", "is_default": True},
            {"name": "Grove of 5", "price": 179.0, "sku": "TREE-5"},
        ],
    )
    current_domain.repository_for(Product).add(product)
    return product


@pytest.fixture()
def sympathy_bouquet(run_around_tests):
    """A flower product priced at $65.00 with 5 in stock."""
    from protean.utils.globals import current_domain

    from memorials.product.product import Product

    product = Product.create(
        sku="FLOWER-SYMPATHY",
        name="Sympathy Bouquet",
        product_type="flower",
        stock_quantity=5,
        variants=[{"name": "Standard", "price": 65.0, "sku": "FLOWER-STD", "is_default": True}],
    )
    current_domain.repository_for(Product).add(product)
    return product


@pytest.fixture()
def obituary(run_around_tests):
    from datetime import date

    from protean.utils.globals import current_domain

    from memorials.obituary.obituary import Obituary

    record = Obituary.create(
        first_name="Margaret",
        last_name="Hale",
        slug="margaret-hale",
        birth_date=date(1941, 3, 2),
        death_date=date(2024, 11, 18),
        location="Portland, Oregon",
    )
    current_domain.repository_for(Obituary).add(record)
    return record
