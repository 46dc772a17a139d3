"""
Declarative base shared by every ORM model.
Kept apart from database.py so models and the session layer can import it
without circular imports.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
