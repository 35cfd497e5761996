from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load environment
load_dotenv()


class Settings(BaseSettings):
    database_url: str
    sql_echo: bool = False
    auto_create_tables: bool = True

    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # "local" writes under upload_root, "spaces" writes to DO Spaces / S3
    storage_backend: str = "local"
    upload_root: str = "uploads"

    do_spaces_key: Optional[str] = None
    do_spaces_secret: Optional[str] = None
    do_spaces_region: str = "nyc3"
    do_spaces_bucket: Optional[str] = None
    do_spaces_endpoint: Optional[str] = None  # e.g. https://nyc3.digitaloceanspaces.com
    do_spaces_cdn_base: Optional[str] = None
    do_spaces_prefix: str = "prod"


settings = Settings()
