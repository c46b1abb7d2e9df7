from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Session settings
    session_secret: str = "your-super-secret-session-key-change-in-production"

    # Web server settings
    api_prefix: str = "/api"
    cors_origins: list[str] = ["*"]

    # Database settings
    database_path: str = "data/markgraph.json"  # empty keeps everything in memory

    # Tagging settings
    strict_tag_delete: bool = False
    top_tags_limit: int = 5

    # Authentication settings
    bcrypt_rounds: int = 12

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL

    model_config = {"env_prefix": "MARKGRAPH_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
