"""Internal constants shared across the library."""

ENDPOINT_URL = "https://esp-server-c5yc.onrender.com/fetch"
GEOLOCATION_URL = "http://ip-api.com/json"
USER_AGENT = "ambutrack/1"

POLL_INTERVAL_S: float = 5.0
POLL_TIMEOUT_S: float = 5.0
LOCATION_TIMEOUT_S: float = 10.0

# ------------------------------------------------------------------
# Presentation
# ------------------------------------------------------------------

DISTANCE_MODE_HAVERSINE = "haversine"
DISTANCE_MODE_PLACEHOLDER = "placeholder"
DISTANCE_MODES: frozenset[str] = frozenset({DISTANCE_MODE_HAVERSINE, DISTANCE_MODE_PLACEHOLDER})

#: Fixed readout shown by the original web client next to the map.
PLACEHOLDER_DISTANCE_KM: float = 2.4

MAP_ZOOM = 13
COORDINATE_DECIMALS = 6
MISSING_TEXT = "N/A"

ALERT_TITLE = "Proximity Alert"
ALERT_MESSAGE = "An ambulance is within 1km of your location. Please proceed with caution."
