from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "cutplanner"
    LOG_LEVEL: str = "INFO"

    # Cutting plan defaults — callers may override per request
    DEFAULT_STOCK_LENGTH_MM: float = 6000.0
    KERF_MM: float = 5.0  # saw blade width, charged once per piece
    BAR_OPENING_POLICY: str = "largest"  # "largest" or "smallest_fit"

    class Config:
        env_file = ".env"


settings = Settings()
