from loguru import logger
from pydantic import BaseModel, Field
from sqlmodel import Session

from src.storefront.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.storefront.core.security import hash_password, verify_password
from src.storefront.core.services.jwt.jwt_gen import JwtGeneratorService
from src.storefront.entities.core.user.entity import User, UserRole
from src.storefront.entities.core.user.repository import UserRepository

_REQUIRED_PROFILE_FIELDS = {"name"}


class RegistrationData(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    district: str | None = None


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    district: str | None = None
    password: str | None = Field(default=None, min_length=6)


class UserManagementService:
    def __init__(self, jwt_service: JwtGeneratorService, db_session: Session):
        self._jwt_service = jwt_service
        self._user_repo = UserRepository(db_session)
        self._db_session = db_session

    def register(self, data: RegistrationData, role: UserRole = UserRole.CUSTOMER) -> User:
        """Create a new account.

        Raises:
            ValidationError: If the email is malformed or the password too long
            ConflictError: If the email is already registered
        """
        if "@" not in data.email:
            raise ValidationError("Invalid email address")
        if self._user_repo.get_by_email(data.email) is not None:
            raise ConflictError("Email already registered")

        user = User(
            name=data.name.strip(),
            email=data.email,
            password_hash=hash_password(data.password),
            role=role,
            phone=data.phone,
            address=data.address,
            city=data.city,
            district=data.district,
        )
        created = self._user_repo.create(user)
        self._db_session.commit()
        logger.bind(user_id=created.id, role=str(role)).info("User registered")
        return created

    def authenticate(self, email: str, password: str) -> tuple[User, str]:
        """Check the credentials and mint an access token for the user."""
        user = self._user_repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.bind(email=email.strip().lower()).info("Login rejected")
            raise AuthenticationError("Invalid email or password")

        token = self._jwt_service.generate_access_token(
            user.id, email=user.email, roles=[str(user.role)]
        )
        return user, token

    def get_profile(self, user_id: str) -> User:
        user = self._user_repo.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, changes: ProfileUpdate) -> User:
        """Apply the fields present in ``changes``; a null ``name`` is ignored."""
        user = self.get_profile(user_id)
        if changes.password:
            user.password_hash = hash_password(changes.password)
        updates = changes.model_dump(exclude_unset=True, exclude={"password"})
        for field, value in updates.items():
            if value is None and field in _REQUIRED_PROFILE_FIELDS:
                continue
            setattr(user, field, value)

        updated = self._user_repo.update(user)
        self._db_session.commit()
        return updated

    def create_or_promote_admin(self, email: str, name: str, password: str) -> tuple[User, bool]:
        """Create an admin account, or promote the existing user with ``email``.

        Returns the user and whether it was newly created.
        """
        existing = self._user_repo.get_by_email(email)
        if existing is None:
            data = RegistrationData(name=name, email=email, password=password)
            return self.register(data, role=UserRole.ADMIN), True

        existing.role = UserRole.ADMIN
        promoted = self._user_repo.update(existing)
        self._db_session.commit()
        logger.bind(user_id=promoted.id).info("User promoted to admin")
        return promoted, False
