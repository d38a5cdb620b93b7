"""
Configuration module for feedscrub.
Centralizes the environment-driven settings; sanitizer policy is not configurable.
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Tokenizer settings
# Articles may inline base64 images; anything above the cap fails closed
MAX_INPUT_SIZE = int(os.getenv("FEEDSCRUB_MAX_INPUT_SIZE", str(16 * 1024 * 1024)))  # 16MB

# Logging settings
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_RETENTION = os.getenv("LOG_RETENTION", "7 days")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
