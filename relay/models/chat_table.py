# relay/models/chat_table.py
# Ephemeral messages addressed by a shared key

from sqlalchemy import Table, Column, Integer, Text, Index

from relay.db.base import metadata


chats = Table(
    'chats',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('key', Text, nullable=False),
    Column('content', Text, nullable=False),
    Index('ix_chats_key', 'key'),
)
