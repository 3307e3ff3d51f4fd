# backend/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint, func
from database import Base

USER_ROLE = "user"
AUTHORITY_ROLE = "authority"
ROLES = (USER_ROLE, AUTHORITY_ROLE)

# Represents an account: a citizen filing complaints or an authority triaging them
class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'authority')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    # Fixed at registration, there is no role-change workflow
    role = Column(String, nullable=False, default=USER_ROLE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
