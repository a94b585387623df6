"""User model — guests and hosts share one account table."""

from enum import StrEnum

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from villamarket.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class AccountType(StrEnum):
    GUEST = "guest"
    HOST = "host"


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A marketplace account. Any user may book; hosts also list villas."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    account_type: Mapped[str] = mapped_column(String(20), default=AccountType.GUEST, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def is_host(self) -> bool:
        return self.account_type == AccountType.HOST

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} account_type={self.account_type!r}>"
