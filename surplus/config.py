"""
config.py – Settings loaded from the environment (.env via python-dotenv).
All values are external: store URL, secrets, media location.
"""
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    database_url:   str = "sqlite:///./surplus.db"
    session_secret: str = "change_this_secret"
    jwt_secret:     str = "dev_secret_change_me"
    token_ttl_days: int = 7
    media_dir:      str = "./media"
    media_url:      str = "/media"
    bcrypt_rounds:  int = 10
    cors_origins:   tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            session_secret=os.getenv("SESSION_SECRET", cls.session_secret),
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            token_ttl_days=int(os.getenv("TOKEN_TTL_DAYS", cls.token_ttl_days)),
            media_dir=os.getenv("MEDIA_DIR", cls.media_dir),
            media_url=os.getenv("MEDIA_URL", cls.media_url),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", cls.bcrypt_rounds)),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )
