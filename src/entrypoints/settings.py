from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    SHOPIFY_STORE_DOMAIN: str
    SHOPIFY_STOREFRONT_ACCESS_TOKEN: str
    SHOPIFY_REVALIDATION_SECRET: str
    SHOPIFY_API_VERSION: str = "2023-01"

    # "fixture" serves the bundled catalogue, "graphql" talks to Shopify
    STOREFRONT_SOURCE: Literal["fixture", "graphql"] = "fixture"

    CACHE_INVALIDATION_URL: str = "http://localhost:3000/api/cache/invalidate"
    CACHE_INVALIDATION_TOKEN: str = ""

    @field_validator("SHOPIFY_STORE_DOMAIN")
    @classmethod
    def _secure_domain(cls, value: str) -> str:
        """Normalise e.g. ``acme.myshopify.com`` to ``https://acme.myshopify.com``."""
        domain = value.strip().rstrip("/")
        if "://" in domain:
            domain = domain.split("://", 1)[1]
        if not domain:
            raise ValueError("SHOPIFY_STORE_DOMAIN must not be empty")
        return f"https://{domain}"
