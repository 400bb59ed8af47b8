from sqlalchemy import BigInteger, Integer, String, orm
from sqlalchemy.orm import mapped_column

from typing_extensions import Annotated

str190 = Annotated[str, 190]
str255 = Annotated[str, 255]

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
bigint = BigInteger().with_variant(Integer(), "sqlite")
bigintpk = Annotated[int, mapped_column(bigint, primary_key=True, autoincrement=True)]


class Base(orm.DeclarativeBase):
    type_annotation_map = {
        str190: String(190),
        str255: String(255),
    }
