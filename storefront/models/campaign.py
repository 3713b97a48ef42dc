"""
E-mail campaign model

store_id and customer_role_id of 0 target all stores / all customer roles.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from storefront.core.database import Base


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(400), nullable=False)
    subject = Column(String(400), nullable=False)
    body = Column(Text, nullable=False, default="")
    store_id = Column(Integer, nullable=False, default=0, index=True)
    customer_role_id = Column(Integer, nullable=False, default=0, index=True)
    dont_send_before_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
