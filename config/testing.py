import os

from .config import DB_CONFIG, POLICY

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()

AUTO_INIT_DB = False

DB_CONFIG = dict(DB_CONFIG, database=os.getenv("DB_NAME", "hr_roster_test"))
POLICY = dict(POLICY)
