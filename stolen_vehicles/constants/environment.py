from enum import Enum

class EnvironmentVariable(Enum):
    ENV = 'ENV'
    HTTP_TIMEOUT_SECONDS = 'HTTP_TIMEOUT_SECONDS'
    PLATE_RECOGNIZER_API_KEY = 'PLATE_RECOGNIZER_API_KEY'
    PLATE_RECOGNIZER_REGIONS = 'PLATE_RECOGNIZER_REGIONS'
    STOLEN_VEHICLES_FEED_URL = 'STOLEN_VEHICLES_FEED_URL'
    STOLEN_VEHICLES_SNAPSHOT_PATH = 'STOLEN_VEHICLES_SNAPSHOT_PATH'
    STOLEN_VEHICLES_TEMP_DIR = 'STOLEN_VEHICLES_TEMP_DIR'
    TWITTER_ACCESS_TOKEN = 'TWITTER_ACCESS_TOKEN'
    TWITTER_ACCESS_TOKEN_SECRET = 'TWITTER_ACCESS_TOKEN_SECRET'
    TWITTER_API_KEY = 'TWITTER_API_KEY'
    TWITTER_API_SECRET = 'TWITTER_API_SECRET'
    TWITTER_USER_ID = 'TWITTER_USER_ID'

PRODUCTION = 'production'

DEFAULT_HTTP_TIMEOUT_SECONDS: float = 30.0
