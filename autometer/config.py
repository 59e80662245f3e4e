"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Tariff store: "redis" or "memory"
    tariff_store: str = "redis"
    redis_url: str = "redis://localhost:6379/0"
    fare_settings_key: str = "fareSettings"

    # Default tariff (Kerala auto rickshaw)
    default_base_fare: float = 30.0  # INR, covers the base distance
    default_base_distance_km: float = 1.5
    default_rate_per_km: float = 15.0  # INR / km beyond the base distance
    max_base_distance_km: float = 10.0

    # Distance filter, per inter-sample delta
    jitter_floor_km: float = 0.01
    teleport_ceiling_km: float = 1.0

    # Meter session
    tick_interval_seconds: float = 1.0
    position_accuracy: str = "high"
    position_time_interval_ms: int = 5_000
    position_distance_interval_m: int = 10

    # Tariff watcher
    tariff_refresh_interval_seconds: float = 1.0

    # Google Maps
    google_maps_api_key: str = ""
    google_maps_base_url: str = "https://maps.googleapis.com/maps/api"
    maps_country: str = "in"
    maps_timeout_seconds: float = 10.0
    autocomplete_debounce_seconds: float = 0.3
    max_displayed_estimates: int = 256

    # API
    host: str = "0.0.0.0"
    port: int = 8000
    rate_limit: str = "100/minute"
    currency_symbol: str = "₹"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
