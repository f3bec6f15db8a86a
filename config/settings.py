"""Configuration settings for the Story Spoiler API test suite."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Story Spoiler service
STORY_API_BASE_URL = os.getenv("STORY_API_BASE_URL", "https://d3s5nxhwblsjbi.cloudfront.net").rstrip("/")
STORY_API_USERNAME = os.getenv("STORY_API_USERNAME", "userPlams33")
STORY_API_PASSWORD = os.getenv("STORY_API_PASSWORD", "123456789")

# Per-request timeout in seconds
STORY_API_TIMEOUT = float(os.getenv("STORY_API_TIMEOUT", "10.0"))

# Where failure context JSON files are written
STORY_API_FAILURES_DIR = os.getenv("STORY_API_FAILURES_DIR", "failures")

if not STORY_API_BASE_URL:
    raise ValueError(
        "STORY_API_BASE_URL is empty. "
        "Please set it in your .env file or unset it to use the default service."
    )

if not STORY_API_USERNAME or not STORY_API_PASSWORD:
    raise ValueError(
        "STORY_API_USERNAME and STORY_API_PASSWORD must not be empty. "
        "Please set them in your .env file."
    )
