from decimal import Decimal

from sqlalchemy import Numeric
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    # money columns default to cents precision
    type_annotation_map = {
        Decimal: Numeric(14, 2),
    }
