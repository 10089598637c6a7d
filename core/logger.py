# core/logger.py
import logging
import os

LOG_DIR = os.environ.get('IDLE_LEVELER_LOG_DIR', 'logs')
LOG_LEVEL = os.environ.get('IDLE_LEVELER_LOG_LEVEL', 'INFO').upper()

def get_logger(name):
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(LOG_DIR, 'idle_leveler.log'), encoding='utf-8')
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        # The engine narrates every step, so the console only shows warnings and up.
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s [%(name)s] %(message)s'))
        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
    return logger
