# relay/models/session_table.py
# One-time invite keys; userId is checked by the handler, not a foreign key

from sqlalchemy import Table, Column, Integer, Text

from relay.db.base import metadata


sessions = Table(
    'sessions',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('userId', Integer, nullable=False),
    Column('key', Text, nullable=False, unique=True),
)
