"""
Store model

A storefront in a multi-store installation. Settings, campaigns and
currencies may be scoped to a store.
"""
from sqlalchemy import Column, Integer, String, Boolean

from storefront.core.database import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(400), nullable=False)
    url = Column(String(400), nullable=False, default="")
    ssl_enabled = Column(Boolean, default=False, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)


DEFAULT_STORES = [
    {"id": 1, "name": "Your store name", "url": "http://localhost:8000/", "display_order": 1},
]
