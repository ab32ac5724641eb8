from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Settings
    app_name: str = "RPG Maker Asset Decoder"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Header Scheme Settings (RPG Maker MV/MZ defaults)
    header_length: int = 16
    signature: str = "5250474d56000000"       # "RPGMV" + NUL padding
    signature_version: str = "000301"         # 0.3.1
    signature_remain: str = "0000000000"      # reserved
    verify_signature: bool = True             # Reject files without the fake signature

    # Batch Decoding Settings
    output_dir_name: str = "decrypted"        # Created next to the project root
    decode_workers: int = 4

    # Upload Settings
    max_upload_bytes: int = 256 * 1024 * 1024

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "RPGM_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
