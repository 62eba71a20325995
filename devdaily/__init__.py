"""DevDaily catalog: price-comparison storefront and back office."""

__version__ = "0.1.0"
