"""Session bootstrap for the Story Spoiler API."""
from src.session.bootstrap import Credentials, StorySession, fetch_access_token
from src.session.tracking import TrackingClient

__all__ = ["Credentials", "StorySession", "TrackingClient", "fetch_access_token"]
