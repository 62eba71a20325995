"""Shared fixtures."""

from collections.abc import Iterator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from devdaily.application.admin_service import AdminService
from devdaily.application.auth_service import AuthService
from devdaily.application.demo_catalog import seed_demo_catalog
from devdaily.application.product import ProductOrchestrator, build_product_orchestrator
from devdaily.domain.entities import Category, Link, Marketplace
from devdaily.dtos.auth_requests import LoginRequest
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.memory import Repositories, get_repositories, reset_repositories
from devdaily.main import app


@pytest.fixture(autouse=True)
def fresh_repositories() -> Iterator[None]:
    """Every test starts with empty in-memory storage."""
    reset_repositories()
    yield
    reset_repositories()


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
    """bcrypt at its minimum cost keeps the suite quick."""
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest.fixture
def repositories() -> Repositories:
    return get_repositories()


@pytest.fixture
def orchestrator(repositories: Repositories) -> ProductOrchestrator:
    return build_product_orchestrator(repositories=repositories)


@pytest.fixture
def category(repositories: Repositories) -> Category:
    return repositories.categories.add(Category(name="Laptops", slug="laptops"))


@pytest.fixture
def marketplace(repositories: Repositories) -> Marketplace:
    return repositories.marketplaces.add(Marketplace(name="Tokopedia", slug="tokopedia"))


@pytest.fixture
def add_link(repositories: Repositories, marketplace: Marketplace):
    """Attach an active marketplace link to a product id."""

    def _add(product_id: int, price: str = "1200000") -> Link:
        return repositories.links.add(
            Link(
                product_id=product_id,
                marketplace_id=marketplace.id,
                store_name="Official Store",
                url=f"https://www.tokopedia.com/item-{product_id}",
                price=Decimal(price),
            )
        )

    return _add


@pytest.fixture
async def demo_catalog(repositories: Repositories) -> dict[str, int]:
    """Seed the published demo catalog."""
    return await seed_demo_catalog(repositories=repositories)


@pytest.fixture
def admin_token() -> str:
    """Token for the default super admin."""
    AdminService().ensure_default_admin()
    result = AuthService().login(
        LoginRequest.from_request(
            {"identifier": settings.default_admin_username, "password": settings.default_admin_password}
        )
    )
    return result.token


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_headers(admin_token: str) -> dict[str, str]:
    """Get authentication headers."""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def auth_client(auth_headers: dict[str, str]) -> TestClient:
    """Create test client signed in as the default super admin."""
    return TestClient(app, headers=auth_headers)
