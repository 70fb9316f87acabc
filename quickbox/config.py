"""Engine configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine and server settings."""

    # History
    HISTORY_LIMIT: int = 50  # Undo entries kept, oldest evicted first
    COALESCE_WINDOW: float = 0.3  # Seconds

    # Geometry floors
    MIN_BOX_SIZE: int = 30
    MIN_REGION_HEIGHT: int = 40
    DEFAULT_REGION_HEIGHT: int = 80
    MIN_CANVAS_SIZE: int = 200

    # Main region layout
    MIN_MAIN_HEIGHT: int = 600
    MAIN_PADDING: int = 100

    DUPLICATE_OFFSET: int = 20

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    model_config = {"env_prefix": "QUICKBOX_"}


settings = Settings()
