from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Program identity (base58). The all-ones string is the all-zero key.
    curve_program_id: str = "11111111111111111111111111111111"

    # Token custody subsystem (SPL Token program)
    token_program_id: str = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False


settings = Settings()
