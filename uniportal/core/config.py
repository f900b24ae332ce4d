from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    # If DEV and you hit SSL cert issues on Windows, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # --- SESSION COOKIE ---
    SESSION_COOKIE_NAME: str = "uniportal_session"
    SESSION_MAX_AGE: int = 60 * 60 * 8
    SESSION_HTTPS_ONLY: bool = False

    # --- ROLE MENU GUARD ---
    MENU_BASE_PATH: str = "/staff"
    MENU_ALLOW_IF_NO_CONFIG: bool = True
    MENU_SUPER_ROLES: List[str] = ["admin", "superadmin", "administrator"]

    # --- BOOTSTRAP ADMIN ---
    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_USERNAME: str | None = "superadmin"
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "Super Admin"

    ENV: str = "dev"  # "dev" or "prod"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
