"""Deterministic demo catalog.

Seeds marketplaces, categories, badges and a handful of published
products with links so a fresh install has something to browse. Running
it twice is safe: rows whose slug already exists are left alone.
"""

from decimal import Decimal

import structlog

from devdaily.application.category_service import CategoryService
from devdaily.application.link_service import MARKETPLACE_DOMAINS, LinkService
from devdaily.application.marketplace_service import BadgeService, MarketplaceService
from devdaily.application.product import build_product_orchestrator
from devdaily.domain.repositories import ProductRepository
from devdaily.dtos.catalog_requests import (
    CreateBadgeRequest,
    CreateCategoryRequest,
    CreateLinkRequest,
    CreateMarketplaceRequest,
)
from devdaily.dtos.product_requests import CreateProductRequest, PublishProductRequest
from devdaily.infrastructure.memory import Repositories, get_repositories

logger = structlog.get_logger()

MARKETPLACES = [
    ("Tokopedia", "tokopedia", "#42b549"),
    ("Shopee", "shopee", "#ee4d2d"),
    ("Lazada", "lazada", "#0f146d"),
    ("Blibli", "blibli", "#0095da"),
]

# (name, slug, icon, parent slug)
CATEGORIES = [
    ("Laptops", "laptops", "fas fa-laptop", None),
    ("Peripherals", "peripherals", "fas fa-keyboard", None),
    ("Keyboards", "keyboards", "fas fa-keyboard", "peripherals"),
    ("Mice", "mice", "fas fa-mouse", "peripherals"),
    ("Monitors", "monitors", "fas fa-desktop", None),
    ("Audio", "audio", "fas fa-headphones", None),
]

BADGES = [("Best Seller", "#f59e0b"), ("Editor's Pick", "#0ea5e9")]

# (name, category slug, market price, [(marketplace slug, store, price)])
PRODUCTS = [
    (
        "Lenovo ThinkPad X1 Carbon Gen 11",
        "laptops",
        "28999000",
        [("tokopedia", "Lenovo Official Store", "27499000"), ("shopee", "Lenovo Indonesia", "27750000")],
    ),
    (
        "Keychron K2 Wireless Mechanical Keyboard",
        "keyboards",
        "1450000",
        [("tokopedia", "Keychron Indonesia", "1399000"), ("lazada", "Keychron ID", "1425000")],
    ),
    (
        "Logitech MX Master 3S",
        "mice",
        "1699000",
        [("shopee", "Logitech Official", "1549000"), ("blibli", "Logitech Store", "1599000")],
    ),
    (
        "Dell UltraSharp U2723QE 27\" 4K",
        "monitors",
        "9999000",
        [("tokopedia", "Dell Official Store", "9499000")],
    ),
    (
        "Sony WH-1000XM5",
        "audio",
        "5999000",
        [("shopee", "Sony Center", "5299000"), ("lazada", "Sony Indonesia", "5349000")],
    ),
]


async def seed_demo_catalog(
    products: ProductRepository | None = None,
    repositories: Repositories | None = None,
    admin_id: int | None = None,
) -> dict[str, int]:
    """Create the demo catalog and return how many rows were added per kind."""
    repositories = repositories or get_repositories()
    products = products or repositories.products
    created = {"marketplaces": 0, "categories": 0, "badges": 0, "products": 0, "links": 0}

    marketplace_service = MarketplaceService(repositories)
    for name, slug, color in MARKETPLACES:
        if repositories.marketplaces.get_by_slug(slug) is None:
            marketplace_service.create(CreateMarketplaceRequest(name=name, slug=slug, color=color), admin_id)
            created["marketplaces"] += 1

    category_service = CategoryService(repositories, products)
    for position, (name, slug, icon, parent_slug) in enumerate(CATEGORIES):
        if repositories.categories.get_by_slug(slug) is not None:
            continue
        parent = repositories.categories.get_by_slug(parent_slug) if parent_slug else None
        await category_service.create(
            CreateCategoryRequest(
                name=name,
                slug=slug,
                icon=icon,
                parent_id=parent.id if parent else None,
                sort_order=position,
            ),
            admin_id,
        )
        created["categories"] += 1

    badge_service = BadgeService(repositories, products)
    existing_badges = {badge.label for badge in repositories.badges.all()}
    for label, color in BADGES:
        if label not in existing_badges:
            badge_service.create(CreateBadgeRequest(label=label, color=color), admin_id)
            created["badges"] += 1

    orchestrator = build_product_orchestrator(products=products, repositories=repositories)
    links = LinkService(repositories, products)
    for name, category_slug, price, offers in PRODUCTS:
        request = CreateProductRequest.from_request(
            {"name": name, "market_price": price, "category_id": repositories.categories.get_by_slug(category_slug).id},
            created_by=admin_id,
        )
        if await products.slug_exists(request.slug):
            continue
        product = await orchestrator.create_product(request)
        for marketplace_slug, store_name, offer_price in offers:
            await links.create(
                CreateLinkRequest(
                    product_id=product.id,
                    marketplace_id=repositories.marketplaces.get_by_slug(marketplace_slug).id,
                    store_name=store_name,
                    url=f"https://www.{MARKETPLACE_DOMAINS[marketplace_slug][0]}/{product.slug}",
                    price=Decimal(offer_price),
                    rating=Decimal("4.8"),
                ),
                admin_id,
            )
            created["links"] += 1
        await orchestrator.request_verification(product.id, admin_id)
        await orchestrator.verify_product(product.id, admin_id, "Demo data")
        await orchestrator.publish_product(PublishProductRequest(product_id=product.id, admin_id=admin_id))
        created["products"] += 1

    logger.info("Demo catalog seeded", **created)
    return created
