from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

# Roles
MASTER_ADMIN = "master_admin"
COMPANY_SUPER_ADMIN = "company_super_admin"
COMPANY_ADMIN = "company_admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True)
    password_hash = Column(String)
    role = Column(String, default=COMPANY_ADMIN, nullable=False)  # master_admin | company_super_admin | company_admin
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)  # NULL for master admins
    module_access = Column(JSON, default=list, nullable=False)  # module names a company_admin may open
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    company = relationship("Company", back_populates="users")
