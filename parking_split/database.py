# database.py
from databases import Database
from sqlalchemy import create_engine, MetaData

from parking_split.config import DATABASE_URL

# Core database objects shared by the stores and the app startup
database = Database(DATABASE_URL)
metadata = MetaData()
engine = create_engine(DATABASE_URL)
