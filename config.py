import os
from dotenv import load_dotenv
load_dotenv()

HOST = os.getenv("S3DECK_HOST", "127.0.0.1")
PORT = int(os.getenv("S3DECK_PORT", "8082"))

CONFIG_DIR = os.path.expanduser(os.getenv("S3DECK_CONFIG_DIR", os.path.join("~", ".s3deck")))

catalog_config = {
    "CONFIG_DIR": CONFIG_DIR,
    "CATALOG_FILE": os.path.join(CONFIG_DIR, "config.json"),
}

LOG_CONFIG = {
    "LOG_LEVEL": os.getenv("S3DECK_LOG_LEVEL", "INFO"),
    "LOG_TO_FILE": os.getenv("S3DECK_LOG_TO_FILE", "true"),
    "LOGS_DIR": os.path.join(CONFIG_DIR, "logs"),
}

S3_CONFIG = {
    "DELIMITER": "/",
    "MAX_KEYS_PER_PAGE": 1000,
    "DELETE_BATCH_SIZE": 1000,
    "DEFAULT_CONTENT_TYPE": "application/octet-stream",
}
