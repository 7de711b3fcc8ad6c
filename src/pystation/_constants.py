"""Internal constants shared across the library."""

API_BASE_URL = "https://mysecurity.eufylife.com/api/v1/"
USER_AGENT = "okhttp/3.12.1"

#: Channel addressing the station itself rather than one of its devices.
STATION_CHANNEL = 255

#: Parameter type the station reports on a noisy duplicate channel.
IGNORED_PARAM_TYPE = 1147

# ------------------------------------------------------------------
# Reconnect backoff (milliseconds)
# ------------------------------------------------------------------

RECONNECT_INITIAL_DELAY_MS = 5_000
RECONNECT_SHORT_STEP_MS = 10_000
RECONNECT_LONG_STEP_MS = 60_000
RECONNECT_SHORT_LIMIT_MS = 60_000
RECONNECT_MAX_DELAY_MS = 600_000

# ------------------------------------------------------------------
# Firmware thresholds used by command routing
# ------------------------------------------------------------------

GUARD_MODE_PAYLOAD_MAX_VERSION = "2.0.7.9"
LIVESTREAM_PAYLOAD_MIN_VERSION = "2.0.9.7"
LIVESTREAM_T8420_PREFIX = "T8420"
LIVESTREAM_T8420_MIN_VERSION = "1.0.0.25"

#: ``commandType`` of the doorbell-style livestream payload.
DOORBELL_LIVESTREAM_SUBCOMMAND = 1000
