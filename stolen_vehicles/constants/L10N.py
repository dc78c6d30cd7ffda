CLEAR_VERDICT_STRING = (
    'Plate detected: {} - Not reported stolen\n\n'
    'Vehicle list last updated: {}')

FAILED_LOOKUP_STRING = (
    "Sorry, I couldn't process that image. Please try again later.")

FRESHNESS_JUST_NOW = 'just now'
FRESHNESS_NEVER = 'Never'
FRESHNESS_SECONDS_STRING = '{} seconds ago'
FRESHNESS_UNIT_STRING = '{} {}{} ago'

NO_PLATE_DETECTED_STRING = 'No license plate detected in the image.'

STOLEN_VERDICT_STRING = (
    'STOLEN\n'
    'Plate detected: {plate}\n'
    'Vehicle: {brand} {model} ({year})\n'
    'Color: {colour}\n'
    'Stolen from: {place}\n'
    'Date: {date}\n\n'
    'Vehicle list last updated: {freshness}')

def pluralize(number: int) -> str:
    return '' if number == 1 else 's'
