"""
Setting model

Key-value store for plugin and service configuration with per-store overrides.

store_id = 0 holds the global value. Any other store_id holds an override
for that store; when it is absent the global value applies.
"""
from sqlalchemy import Column, Integer, String, Text, Index

from storefront.core.database import Base


class Setting(Base):
    __tablename__ = "settings"
    __table_args__ = (
        Index("ix_settings_name_store", "name", "store_id", unique=True),
    )

    id = Column(Integer, primary_key=True, index=True)

    # "<settingsclass>.<field>", e.g. "canadapostsettings.api_key"
    name = Column(String(200), nullable=False, index=True)
    value = Column(Text, nullable=False, default="")
    store_id = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Setting {self.name}@{self.store_id}>"
