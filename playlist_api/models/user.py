from sqlalchemy import Column, Integer, String, ForeignKey, Table
from sqlalchemy.orm import relationship, validates
from playlist_api.core.database import Base
from playlist_api.models.base import TimestampMixin, UUIDMixin


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(64), unique=True, index=True, nullable=False)

    def __repr__(self):
        return f"<Role {self.name}>"


class User(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "users"

    user_name = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Relationships
    roles = relationship("Role", secondary=user_roles, lazy="selectin")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.user_name}>"

    @property
    def role_names(self) -> list[str]:
        return sorted(role.name for role in self.roles)

    @validates("email")
    def normalize_email(self, key, value):
        return value.strip().lower() if value else value
