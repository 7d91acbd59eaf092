"""Authentication flows: registration, sign-in and the password lifecycle."""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, settings
from ..config.settings import AuthSettings
from ..models.user import User
from ..schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SignInRequest,
)
from ..services.email import EmailService
from ..services.notifications import NotificationService, notification_service
from ..services.users import UserStore
from .exceptions import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from .logging import BusinessLogger, SecurityLogger
from .passwords import MAX_PASSWORD_BYTES, PasswordHasher
from .tokens import TokenIssuer, generate_reset_token, hash_reset_token


class AuthService:
    """Authentication service.

    Every method takes the request's session as its first argument and
    commits its own unit of work.
    """

    def __init__(
        self,
        auth_settings: AuthSettings,
        frontend_url: str,
        mailer: EmailService,
        notifier: NotificationService,
        hasher: Optional[PasswordHasher] = None,
        tokens: Optional[TokenIssuer] = None,
    ):
        self.settings = auth_settings
        self.frontend_url = frontend_url.rstrip("/")
        self.mailer = mailer
        self.notifier = notifier
        self.hasher = hasher or PasswordHasher(rounds=auth_settings.bcrypt_rounds)
        self.tokens = tokens or TokenIssuer(
            secret_key=auth_settings.secret_key,
            algorithm=auth_settings.algorithm,
            expire_minutes=auth_settings.access_token_expire_minutes,
        )

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "AuthService":
        return cls(
            auth_settings=app_settings.auth,
            frontend_url=app_settings.api.frontend_url,
            mailer=EmailService.from_settings(app_settings.mail),
            notifier=notification_service,
        )

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _check_password_policy(self, password: str) -> None:
        if len(password) < self.settings.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.settings.password_min_length} characters long!"
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long!")

    async def register(self, db: AsyncSession, request: RegisterRequest) -> User:
        """Create an account and its signup notification in one transaction."""
        if not all([request.first_name, request.last_name, request.email, request.password]):
            raise ValidationError()
        self._check_password_policy(request.password)

        store = UserStore(db)
        if await store.email_exists(request.email):
            raise ConflictError()

        user = await store.create(
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            password_hash=self.hasher.hash(request.password),
            role=request.role,
            gender=request.gender,
            location=request.location,
            phone_number=request.phone_number,
        )
        await self.notifier.notify_signup(db, user)
        await db.commit()
        await db.refresh(user)

        BusinessLogger.log_user_registered(str(user.id), user.email, user.role)
        return user

    async def sign_in(
        self,
        db: AsyncSession,
        request: SignInRequest,
        ip_address: Optional[str] = None
    ) -> Tuple[User, str]:
        """Check credentials and issue an access token."""
        if not request.email or not request.password:
            raise ValidationError()

        user = await UserStore(db).get_by_email(request.email)
        if user is None:
            self.hasher.burn(request.password)
            failure = "unknown_email"
        elif not self.hasher.verify(request.password, user.password_hash):
            failure = "wrong_password"
        elif not user.is_active:
            failure = "inactive"
        else:
            failure = None

        if failure:
            SecurityLogger.log_login_attempt(
                request.email, success=False, ip_address=ip_address, failure_reason=failure
            )
            raise InvalidCredentialsError()

        token = self.tokens.issue(user)
        SecurityLogger.log_login_attempt(request.email, success=True, ip_address=ip_address)
        return user, token

    async def forgot_password(self, db: AsyncSession, request: ForgotPasswordRequest) -> None:
        """Store a hashed reset ticket and email the raw token.

        Unknown emails get the same outcome as known ones unless
        ``reveal_unknown_reset_email`` is set.
        """
        if not request.email:
            raise ValidationError("Email is required!")

        store = UserStore(db)
        user = await store.get_by_email(request.email)
        SecurityLogger.log_password_reset_requested(request.email, user_found=user is not None)
        if user is None:
            if self.settings.reveal_unknown_reset_email:
                raise NotFoundError()
            return

        raw_token, hashed_token = generate_reset_token()
        expires_at = self._now() + timedelta(minutes=self.settings.reset_token_expire_minutes)
        await store.set_reset_ticket(user, hashed_token, expires_at)
        await db.commit()

        reset_link = f"{self.frontend_url}/reset-password/{raw_token}"
        await self.mailer.send_password_reset(
            user.email, reset_link, expire_minutes=self.settings.reset_token_expire_minutes
        )

    async def reset_password(self, db: AsyncSession, request: ResetPasswordRequest) -> None:
        """Consume a reset ticket and set the new password."""
        if not request.reset_token or not request.new_password:
            raise ValidationError()
        self._check_password_policy(request.new_password)

        store = UserStore(db)
        hashed_token = hash_reset_token(request.reset_token)
        now = self._now()

        user = await store.find_by_reset_token(hashed_token, now)
        if user is None:
            SecurityLogger.log_invalid_reset_token()
            raise NotFoundError()
        user_id = user.id

        password_hash = self.hasher.hash(request.new_password)
        if not await store.consume_reset_ticket(hashed_token, password_hash, now):
            # Another request consumed the ticket after the lookup
            SecurityLogger.log_invalid_reset_token()
            raise NotFoundError()

        await self.notifier.notify_password_reset(db, user_id)
        await db.commit()
        SecurityLogger.log_password_changed(str(user_id), via="reset")

    async def change_password(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        request: ChangePasswordRequest
    ) -> User:
        """Change password for a signed-in user and revoke older tokens."""
        if not request.old_password or not request.new_password:
            raise ValidationError()
        self._check_password_policy(request.new_password)

        store = UserStore(db)
        user = await store.get_by_id(user_id)
        if user is None:
            raise NotFoundError()
        if not self.hasher.verify(request.old_password, user.password_hash):
            raise InvalidCredentialsError("Invalid password!")

        await store.update_password(user, self.hasher.hash(request.new_password))
        await self.notifier.notify_password_changed(db, user.id)
        await db.commit()
        await db.refresh(user)

        SecurityLogger.log_password_changed(str(user.id), via="change", token_version=user.token_version)
        return user

    async def authenticate_token(self, db: AsyncSession, token: str) -> User:
        """Resolve a bearer token to its user.

        Raises ``InvalidTokenError`` when the token fails verification, the
        user is gone or inactive, or the token predates the user's last
        password change.
        """
        claims = self.tokens.verify(token)

        user = await UserStore(db).get_by_id(claims.sub)
        if user is None:
            raise InvalidTokenError("User no longer exists")
        if claims.token_version != user.token_version:
            raise InvalidTokenError("Token has been revoked")
        if not user.is_active:
            raise InvalidTokenError("Inactive user")
        return user


# Global auth service instance
auth_service = AuthService.from_settings(settings)
