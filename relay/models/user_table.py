# relay/models/user_table.py
# Registered users; identifier is unique at the storage level

from sqlalchemy import Table, Column, Integer, Text

from relay.db.base import metadata


users = Table(
    'users',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('name', Text, nullable=False),
    Column('identifier', Text, nullable=False, unique=True),
)
