"""PostgreSQL storage"""
from .connection import get_connection, get_connection_string, init_schema
