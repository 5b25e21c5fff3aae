"""Password hashing, JWT issuing/verification and the bearer auth dependency."""
from datetime import datetime, timedelta, timezone

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from errors import AuthenticationError
from logger import get_logger

logger = get_logger("security")

BCRYPT_ROUNDS = 10

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    """Hash a plain text password using the configured password hashing context"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify if a plain text password matches its hashed version"""
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Spend the time of a real verification when there is no hash to check"""
    pwd_context.dummy_verify()


class TokenError(Exception):
    """Base exception for token verification failures"""


class TokenMalformedError(TokenError):
    """Token cannot be parsed or lacks a usable subject"""


class TokenExpiredError(TokenError):
    """Token expiry has passed"""


class TokenSignatureError(TokenError):
    """Token signature does not match the signing secret"""


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens.

    The service is stateless: verification is purely cryptographic and
    never consults the user table.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        if not secret_key:
            raise ValueError("A signing secret is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @property
    def lifetime_seconds(self) -> int:
        return self.expire_minutes * 60

    def issue(self, user_id: int, expires_delta: timedelta | None = None) -> str:
        """Create a signed token for the given user id"""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=self.expire_minutes))
        claims = {"sub": str(user_id), "iat": now, "exp": expire}
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """Return the user id carried by a valid token.

        Raises TokenMalformedError, TokenExpiredError or TokenSignatureError.
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise TokenMalformedError("Token is malformed") from exc

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except JWTError as exc:
            raise TokenSignatureError("Token signature is invalid") from exc

        subject = payload.get("sub")
        if subject is None:
            raise TokenMalformedError("Token has no subject")
        try:
            return int(subject)
        except (TypeError, ValueError) as exc:
            raise TokenMalformedError("Token subject is not a user id") from exc


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header value"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def get_current_user_id(request: Request) -> int:
    """Resolve the authenticated user id from the bearer token on the request"""
    token = parse_bearer(request.headers.get("Authorization"))
    if token is None:
        raise AuthenticationError("Not authenticated")

    tokens: TokenService = request.app.state.token_service
    try:
        user_id = tokens.verify(token)
    except TokenExpiredError:
        raise AuthenticationError("Token has expired")
    except TokenError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise AuthenticationError("Invalid token")

    request.state.user_id = user_id
    return user_id
