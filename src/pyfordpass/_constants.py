"""Internal constants shared across the library."""

AUTH_URL = "https://fcis.ice.ibmcloud.com/v1.0/endpoint/default/token"
API_URL = "https://usapi.cv.ford.com"
CLIENT_ID = "9fb503e0-715b-47e8-adfd-ad4b7770f73b"
APPLICATION_ID = "71A3AD0A-CF46-4CCF-B473-FC7FE5BC4592"
USER_AGENT = "fordpass-na/353 CFNetwork/1121.2.2 Darwin/19.3.0"

# Host registration scope.
PLUGIN_NAME = "homebridge-fordpass"
PLATFORM_NAME = "FordPass"
MANUFACTURER = "Ford"

# HomeKit Accessory Protocol bridge.
BRIDGE_NAME = "FordPass Bridge"
HAP_PORT = 51826
HAP_READ_TIMEOUT: float = 10.0

# ------------------------------------------------------------------
# Scheduling (seconds)
# ------------------------------------------------------------------

#: Sessions expire after about two hours upstream; refresh with margin.
SESSION_REFRESH_INTERVAL: float = 118 * 60
POLL_INTERVAL: float = 60.0
REQUEST_TIMEOUT: float = 30.0

# ------------------------------------------------------------------
# Command acknowledgement polling
# ------------------------------------------------------------------

COMMAND_STATUS_SUCCESS = 200
COMMAND_STATUS_PENDING = 552
COMMAND_POLL_ATTEMPTS = 12
COMMAND_POLL_INTERVAL: float = 5.0

# ------------------------------------------------------------------
# Characteristic values
# ------------------------------------------------------------------

LOCK_UNSECURED = 0
LOCK_SECURED = 1
