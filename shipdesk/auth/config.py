from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="JWT_")

    secret: str = "shipdesk-change-me"  # 🔐 override with JWT_SECRET
    lifetime_seconds: int = 86400
    algorithm: str = "HS256"
    audience: str = "fastapi-users:auth"


auth_config = AuthConfig()
