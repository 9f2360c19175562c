# app/cart/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class CartClientSettings(BaseSettings):
    """
    Settings for the client-side cart and checkout.

    Env vars use the CART_ prefix, e.g. CART_API_BASE_URL.
    """

    STORAGE_PATH: str = ".fooddash/cart.json"
    API_BASE_URL: str = "http://localhost:8000"
    API_PREFIX: str = "/api"
    TIMEOUT: float = 10.0

    model_config = SettingsConfigDict(env_prefix="CART_", env_file=".env", extra="ignore")


@lru_cache
def get_cart_settings() -> CartClientSettings:
    return CartClientSettings()
