from sqlalchemy.orm import Session
from app.models.base import fits_integer
from app.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> User | None:
        """Get user by internal ID"""
        if not fits_integer(user_id):
            return None
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def create_no_commit(self, user: User) -> User:
        """Add user and assign its id without committing (caller owns the transaction)"""
        self.db.add(user)
        self.db.flush()
        return user

    def delete_no_commit(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()
