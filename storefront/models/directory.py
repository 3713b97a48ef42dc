"""
Directory models: currencies and measures

Currency.rate is expressed relative to the primary store currency
(primary currency has rate 1). Measure ratios are expressed relative to the
primary measure weight/dimension configured in MeasureSettings.
"""
from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime
from sqlalchemy.sql import func

from storefront.core.database import Base


class Currency(Base):
    __tablename__ = "currencies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    currency_code = Column(String(5), nullable=False, index=True)  # ISO 4217
    rate = Column(Numeric(18, 4), nullable=False, default=1)
    display_locale = Column(String(50), nullable=True)
    custom_formatting = Column(String(50), nullable=True)
    published = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class MeasureWeight(Base):
    __tablename__ = "measure_weights"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    system_keyword = Column(String(100), nullable=False, index=True)
    ratio = Column(Numeric(18, 8), nullable=False)
    display_order = Column(Integer, default=0, nullable=False)


class MeasureDimension(Base):
    __tablename__ = "measure_dimensions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    system_keyword = Column(String(100), nullable=False, index=True)
    ratio = Column(Numeric(18, 8), nullable=False)
    display_order = Column(Integer, default=0, nullable=False)


# Seed data. lb(s) and inch(es) are the primary measures (ratio 1).
DEFAULT_MEASURE_WEIGHTS = [
    {"id": 1, "name": "ounce(s)", "system_keyword": "ounce", "ratio": "16", "display_order": 1},
    {"id": 2, "name": "lb(s)", "system_keyword": "lb", "ratio": "1", "display_order": 2},
    {"id": 3, "name": "kg(s)", "system_keyword": "kg", "ratio": "0.45359237", "display_order": 3},
    {"id": 4, "name": "gram(s)", "system_keyword": "grams", "ratio": "453.59237", "display_order": 4},
]

DEFAULT_MEASURE_DIMENSIONS = [
    {"id": 1, "name": "inch(es)", "system_keyword": "inches", "ratio": "1", "display_order": 1},
    {"id": 2, "name": "feet", "system_keyword": "feet", "ratio": "0.08333333", "display_order": 2},
    {"id": 3, "name": "meter(s)", "system_keyword": "meters", "ratio": "0.0254", "display_order": 3},
    {"id": 4, "name": "millimetre(s)", "system_keyword": "millimetres", "ratio": "25.4", "display_order": 4},
]

DEFAULT_CURRENCIES = [
    {"id": 1, "name": "US Dollar", "currency_code": "USD", "rate": "1", "display_locale": "en-US", "display_order": 1},
    {"id": 2, "name": "Canadian Dollar", "currency_code": "CAD", "rate": "1.32", "display_locale": "en-CA", "display_order": 2},
    {"id": 3, "name": "Euro", "currency_code": "EUR", "rate": "0.95", "display_locale": "", "display_order": 3},
    {"id": 4, "name": "British Pound", "currency_code": "GBP", "rate": "0.82", "display_locale": "en-GB", "display_order": 4},
]
