"""Seed the role catalogue and the bootstrap admin account."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from playlist_api.core.config import settings
from playlist_api.core.constants import MusicRoles
from playlist_api.core.security import hash_password
from playlist_api.models.user import Role, User

logger = logging.getLogger(__name__)


class AuthSeeder:

    def __init__(
        self,
        db: Session,
        admin_username: Optional[str] = None,
        admin_email: Optional[str] = None,
        admin_password: Optional[str] = None,
    ):
        self.db = db
        self.admin_username = admin_username or settings.ADMIN_USERNAME
        self.admin_email = admin_email or settings.ADMIN_EMAIL
        self.admin_password = admin_password or settings.ADMIN_PASSWORD

    def seed(self) -> None:
        self.add_default_roles()
        self.add_admin_user()

    def add_default_roles(self) -> list[Role]:
        created = []
        for name in MusicRoles.all():
            if self.db.query(Role).filter(Role.name == name).first() is None:
                role = Role(name=name)
                self.db.add(role)
                created.append(role)
                logger.info("Creating role: %s", name)
        self.db.commit()
        return created

    def add_admin_user(self) -> Optional[User]:
        all_roles = self.db.query(Role).filter(Role.name.in_(MusicRoles.all())).all()

        admin = self.db.query(User).filter(User.user_name == self.admin_username).first()
        if admin is None:
            if not self.admin_password:
                logger.warning("ADMIN_PASSWORD is not set; skipping admin user creation")
                return None
            admin = User(
                user_name=self.admin_username,
                email=self.admin_email,
                password_hash=hash_password(self.admin_password),
            )
            admin.roles.extend(all_roles)
            self.db.add(admin)
            self.db.commit()
            logger.info("Admin user created successfully.")
            return admin

        # Ensure existing admin has all roles
        missing = [role for role in all_roles if role.name not in admin.role_names]
        if missing:
            admin.roles.extend(missing)
            self.db.commit()
            logger.info("Added missing roles (%s) to existing admin.", ", ".join(r.name for r in missing))
        return admin
