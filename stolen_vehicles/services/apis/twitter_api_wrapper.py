import os
import tweepy

from dataclasses import dataclass
from typing import Optional

from stolen_vehicles import settings
from stolen_vehicles.constants.environment import EnvironmentVariable

# Twitter errors worth retrying before a poll gives up.
RETRY_STATUS_CODES = {500, 502, 503, 504}


@dataclass(frozen=True)
class TwitterCredentials:
    api_key: Optional[str]
    api_secret: Optional[str]
    access_token: Optional[str]
    access_token_secret: Optional[str]

    @classmethod
    def from_environment(cls) -> 'TwitterCredentials':
        return cls(
            api_key=os.getenv(EnvironmentVariable.TWITTER_API_KEY.value),
            api_secret=os.getenv(EnvironmentVariable.TWITTER_API_SECRET.value),
            access_token=os.getenv(
                EnvironmentVariable.TWITTER_ACCESS_TOKEN.value),
            access_token_secret=os.getenv(
                EnvironmentVariable.TWITTER_ACCESS_TOKEN_SECRET.value))


def build_api(credentials: Optional[TwitterCredentials] = None) -> tweepy.API:
    """Connect as the bot account. Direct messages need user-context
    OAuth 1.0a, so app-only bearer tokens will not do here.
    """
    credentials = credentials or TwitterCredentials.from_environment()

    auth = tweepy.OAuthHandler(credentials.api_key, credentials.api_secret)
    auth.set_access_token(credentials.access_token,
                          credentials.access_token_secret)

    return tweepy.API(auth,
                      wait_on_rate_limit=True,
                      retry_count=3,
                      retry_delay=5,
                      retry_errors=RETRY_STATUS_CODES)
