from stolen_vehicles.constants.time import SECONDS_PER_MINUTE

# The feed has no header row, so column order is fixed by the upstream provider.
FEED_COLUMNS: list[str] = [
    'Plate',
    'Colour',
    'Brand',
    'Model',
    'Year',
    'Type',
    'Date',
    'Place'
]

DEFAULT_SNAPSHOT_PATH = 'nz_stolen_vehicles.json'

REFRESH_INTERVAL_IN_SECONDS = 15 * SECONDS_PER_MINUTE
