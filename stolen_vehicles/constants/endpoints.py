PLATE_RECOGNIZER_API_BASE_URL = 'https://api.platerecognizer.com/v1'
PLATE_RECOGNIZER_PLATE_READER_PATH = '/plate-reader/'
PLATE_RECOGNIZER_STATISTICS_PATH = '/statistics/'

STOLEN_VEHICLES_FEED_URL = (
    'https://www.police.govt.nz/stolenwanted/vehicles/csv/download'
    '?tid=&all=true&gzip=false')
