"""User repository for data access operations."""

from sqlmodel import Session, select

from src.storefront.entities.core._base import utcnow

from .entity import User
from .table import UserTable


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_email(self, email: str) -> User | None:
        statement = select(UserTable).where(UserTable.email == email.strip().lower())
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def create(self, user: User) -> User:
        row = UserTable(
            id=user.id,
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            role=str(user.role),
            phone=user.phone,
            address=user.address,
            city=user.city,
            district=user.district,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self._session.add(row)
        self._session.flush()
        return user

    def update(self, user: User) -> User:
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise ValueError(f"User {user.id} not found")

        row.name = user.name
        row.email = user.email
        row.password_hash = user.password_hash
        row.role = str(user.role)
        row.phone = user.phone
        row.address = user.address
        row.city = user.city
        row.district = user.district
        row.updated_at = utcnow()
        self._session.add(row)
        self._session.flush()
        return User.model_validate(row, from_attributes=True)
