# core/db.py
import os

import mysql.connector
import yaml

from core.config import ConfigError
from core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DB_CONFIG = 'config/db.yaml'
REQUIRED_KEYS = ('host', 'user', 'password', 'database')

def load_db_config(path: str = DEFAULT_DB_CONFIG) -> dict:
    if not os.path.exists(path):
        raise ConfigError(f"Database config not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {path}: {e}") from e

    section = raw.get('database') if isinstance(raw, dict) else None
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: missing 'database' section")
    missing = [key for key in REQUIRED_KEYS if key not in section]
    if missing:
        raise ConfigError(f"{path}: missing database keys {', '.join(missing)}")
    return section

class Database:
    """MySQL connection to a MaNGOS world database. Rows come back as dicts keyed by column name."""

    def __init__(self, config_path: str = DEFAULT_DB_CONFIG):
        config = load_db_config(config_path)
        try:
            self.conn = mysql.connector.connect(
                host=config['host'],
                user=config['user'],
                password=config['password'],
                database=config['database'],
                port=config.get('port', 3306)
            )
        except mysql.connector.Error as err:
            logger.error(f"Cannot connect to {config['database']} on {config['host']}: {err}")
            raise
        self.cursor = self.conn.cursor(dictionary=True)
        logger.info(f"Connected to world database '{config['database']}' on {config['host']}.")

    def execute(self, query, params=None):
        try:
            self.cursor.execute(query, params)
            return self.cursor.fetchall()
        except mysql.connector.Error as err:
            logger.error(f"Query failed ({err}): {' '.join(query.split())[:120]}")
            raise

    def close(self):
        self.cursor.close()
        self.conn.close()
        logger.info("World database connection closed.")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
