from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DATABASE: str = "storefront"

    PLATFORM_NAME: str = "Storefront"

    JWT_SECRET_KEY: str = "change-me"
    JWT_LIFETIME_SECONDS: int = 3600
    CLIENT_ORIGIN: str = "http://localhost:5173"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    REDIS_URL: str = "redis://localhost:6379"
    RATE_LIMITING_ENABLED: bool = False

    # Mock payment gateway: probability that a charge succeeds
    PAYMENT_SUCCESS_RATE: float = 0.9

    # Checkout quote
    TAX_RATE: float = 0.10
    FREE_SHIPPING_THRESHOLD: float = 50.0
    FLAT_SHIPPING_PRICE: float = 5.99

    LOW_STOCK_THRESHOLD: int = 10

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CLIENT_ORIGIN.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


# create a singleton instance
settings = Settings()
