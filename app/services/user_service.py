import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, UniqueConstraintError
from app.core.security import hash_password
from app.database import unit_of_work
from app.domain.registry import OWNER_KIND, SchemaRegistry
from app.domain.relationships import RelationshipGraph
from app.domain.validation import Validator
from app.models.user import User
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for business accounts (the root of every ownership scope)"""

    def __init__(self, db: Session, registry: SchemaRegistry):
        self.db = db
        self.registry = registry
        self.repo = UserRepository(db)
        self.validator = Validator(registry)
        self.graph = RelationshipGraph(db, registry)

    def register(self, payload: Any) -> User:
        """
        Create a new business account.

        Raises:
            UnknownFieldError, TypeMismatchError: malformed payload
            RecordValidationError: missing username, password or company name
            UniqueConstraintError: username already taken
        """
        username = None
        try:
            with unit_of_work(self.db):
                record = self.registry.normalize(OWNER_KIND, payload)
                self.validator.check(OWNER_KIND, record)
                username = record["username"]
                self._ensure_username_available(username)

                record["password"] = hash_password(record["password"])
                user = self.repo.create_no_commit(User(**record))
        except IntegrityError as e:
            raise UniqueConstraintError(OWNER_KIND, "username", username) from e

        self.db.refresh(user)
        logger.info("Registered user %s (%s)", user.id, user.username)
        return user

    def get_user(self, user_id: int) -> User:
        user = self.repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(OWNER_KIND, user_id)
        return user

    def update_user(self, user: User, payload: Any) -> User:
        """Partial profile update; a new password is hashed, a new username re-checked"""
        username = user.username
        try:
            with unit_of_work(self.db):
                changes = self.registry.normalize(OWNER_KIND, payload, partial=True)
                current = {name: getattr(user, name) for name in changes}
                self.validator.check(OWNER_KIND, {**current, **changes}, touched=changes)

                if "username" in changes and changes["username"] != user.username:
                    username = changes["username"]
                    self._ensure_username_available(username)
                if "password" in changes:
                    changes["password"] = hash_password(changes["password"])

                for name, value in changes.items():
                    setattr(user, name, value)
                self.db.flush()
        except IntegrityError as e:
            raise UniqueConstraintError(OWNER_KIND, "username", username) from e

        self.db.refresh(user)
        logger.info("Updated user %s (%s)", user.id, ", ".join(sorted(changes)) or "no changes")
        return user

    def delete_user(self, user: User) -> None:
        """
        Delete an account.

        Raises:
            ReferentialIntegrityError: the account still owns records
        """
        user_id = user.id
        with unit_of_work(self.db):
            references = self.graph.check_deletable(OWNER_KIND, user_id)
            self.graph.clear_references(references, user_id)
            self.repo.delete_no_commit(user)
        logger.info("Deleted user %s", user_id)

    def _ensure_username_available(self, username: str) -> None:
        if self.repo.get_by_username(username) is not None:
            raise UniqueConstraintError(OWNER_KIND, "username", username)
