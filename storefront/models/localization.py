"""
Locale string resources

UI strings and validator messages, editable by admins and registered by
plugins on install.
"""
from sqlalchemy import Column, Integer, String, Text

from storefront.core.database import Base


class LocaleStringResource(Base):
    __tablename__ = "locale_string_resources"

    id = Column(Integer, primary_key=True, index=True)
    resource_name = Column(String(200), unique=True, nullable=False, index=True)
    resource_value = Column(Text, nullable=False)
