"""
core/identity.py – IdentityProvider class.
Responsibility: register/login users, issue and verify bearer tokens,
resolve a caller to a Principal(user_id, role).

Passwords: bcrypt. Tokens: HS256 JWT (python-jose) with `sub` + `role`.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError, OperationalError

from ..db.models import User
from ..db.session import Database
from ..models import Principal, Role, UserOut
from .convert import user_out
from .errors import NotFound, StoreUnavailable, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

JWT_ALG = "HS256"
_BCRYPT_MAX_BYTES = 72


class IdentityProvider:

    def __init__(
        self,
        db: Database,
        secret: str,
        token_ttl: timedelta = timedelta(days=7),
        bcrypt_rounds: int = 10,
    ) -> None:
        self._db = db
        self._secret = secret
        self._ttl = token_ttl
        self._rounds = bcrypt_rounds

    # ── Public: accounts ───────────────────────────────────────────────────────

    async def register(self, name: str, email: str, password: str, role: str = "student") -> tuple[UserOut, str]:
        name, email = (name or "").strip(), (email or "").strip().lower()
        if not name or not email or not password:
            raise ValidationError("Missing fields")
        parsed_role = self.parse_role(role)
        pw_hash = self._hash(password)
        user = await self._run(self._do_register, name, email, pw_hash, parsed_role)
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> tuple[UserOut, str]:
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Missing fields")
        row = await self._run(self._fetch_credentials, email)
        if row is None or not self._verify(password, row[1]):
            raise ValidationError("Invalid credentials")
        return row[0], self.issue_token(row[0])

    async def get_user(self, user_id: str) -> UserOut:
        return await self._run(self._fetch_user, user_id)

    # ── Public: tokens ─────────────────────────────────────────────────────────

    def issue_token(self, user: UserOut) -> str:
        now = datetime.now(timezone.utc)
        claims = {"sub": user.id, "role": user.role.value, "iat": now, "exp": now + self._ttl}
        return jwt.encode(claims, self._secret, algorithm=JWT_ALG)

    def authenticate(self, token: str | None) -> Principal:
        """Verify a bearer token. Missing/invalid/expired → Unauthorized."""
        if not token:
            raise Unauthorized("No token")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[JWT_ALG])
            return Principal(user_id=claims["sub"], role=Role(claims["role"]))
        except (JWTError, KeyError, ValueError) as e:
            logger.info(f"Rejected token: {type(e).__name__}")
            raise Unauthorized("Invalid token")

    @staticmethod
    def parse_role(value: str | Role | None) -> Role:
        try:
            return Role(value or Role.STUDENT.value)
        except ValueError:
            raise ValidationError(f"Unknown role: {value!r}")

    # ── Private ────────────────────────────────────────────────────────────────

    async def _run(self, fn, *args):
        try:
            return await asyncio.get_event_loop().run_in_executor(None, fn, *args)
        except OperationalError as e:
            logger.error(f"Identity store error: {e}")
            raise StoreUnavailable() from e

    def _hash(self, password: str) -> str:
        raw = password.encode("utf-8")
        if len(raw) > _BCRYPT_MAX_BYTES:
            raise ValidationError("Password too long")
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self._rounds)).decode("ascii")

    @staticmethod
    def _verify(password: str, pw_hash: str) -> bool:
        raw = password.encode("utf-8")
        if len(raw) > _BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(raw, pw_hash.encode("ascii"))
        except ValueError:
            # stored value is not a bcrypt hash
            return False

    def _do_register(self, name: str, email: str, pw_hash: str, role: Role) -> UserOut:
        try:
            with self._db.session() as session:
                if session.query(User.id).filter(User.email == email).first() is not None:
                    raise ValidationError("Email already used")
                user = User(name=name, email=email, password_hash=pw_hash, role=role.value)
                session.add(user)
                session.flush()
                out = user_out(user)
        except IntegrityError:
            raise ValidationError("Email already used")
        logger.info(f"User registered: {out.id} ({role.value})")
        return out

    def _fetch_credentials(self, email: str) -> tuple[UserOut, str] | None:
        with self._db.session() as session:
            user = session.query(User).filter(User.email == email).first()
            if user is None:
                return None
            return user_out(user), user.password_hash

    def _fetch_user(self, user_id: str) -> UserOut:
        with self._db.session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFound("User not found")
            return user_out(user)
