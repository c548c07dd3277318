"""Constants for the Cast Bridge."""

CONF_APPLICATION_ID = "application_id"
CONF_IDLE_APPLICATION_IDS = "idle_application_ids"
CONF_QUEUE_CHUNK_SIZE = "queue_chunk_size"
CONF_TICK_INTERVAL = "tick_interval"
CONF_REFRESH_EVERY_TICKS = "refresh_every_ticks"
CONF_MEDIA_ID_KEY = "media_id_key"
CONF_USER_KEY = "user_key"
CONF_HTTP_PORT = "http_port"
CONF_PROGRESS_URL = "progress_url"
CONF_CLIENT_NAME = "client_name"
CONF_CLIENT_VERSION = "client_version"

# Default Media Receiver; launched when neither config nor channel name an application
DEFAULT_MEDIA_RECEIVER_APP_ID = "CC1AD845"
# Backdrop (ambient screen) application shown by an idle receiver
BACKDROP_APP_ID = "E8C28D3C"

DEFAULT_APPLICATION_ID: str | None = None
DEFAULT_IDLE_APPLICATION_IDS = (BACKDROP_APP_ID,)
DEFAULT_QUEUE_CHUNK_SIZE = 20  # receivers reject larger queue batches
DEFAULT_TICK_INTERVAL = 1.0  # seconds
DEFAULT_REFRESH_EVERY_TICKS = 10
DEFAULT_MEDIA_ID_KEY = "Id"
DEFAULT_USER_KEY = "Username"
DEFAULT_HTTP_PORT = 8099
DEFAULT_PROGRESS_URL: str | None = None
DEFAULT_CLIENT_NAME = "Cast Bridge"
DEFAULT_CLIENT_VERSION = "1.0.0"

# Receiver player states
PLAYER_STATE_IDLE = "IDLE"
PLAYER_STATE_PLAYING = "PLAYING"
PLAYER_STATE_PAUSED = "PAUSED"
PLAYER_STATE_FINISHED = "FINISHED"

# Progress positions are reported in 100ns ticks
TICKS_PER_SECOND = 10_000_000
