"""Key-value configuration model."""

from sqlalchemy import Column, DateTime, String, Text, func

from yappy.database import Base


class ConfigEntry(Base):
    """Singleton configuration values (passcode, admin pointer)."""

    __tablename__ = "config"

    PASSCODE = "passcode"
    ADMIN_USER_ID = "admin_user_id"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
