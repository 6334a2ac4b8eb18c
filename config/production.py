import os

from .config import DB_CONFIG, POLICY, Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = Config.AUTO_INIT_DB

DB_CONFIG = dict(DB_CONFIG)
POLICY = dict(POLICY)
