"""Default settings and a sample location used in the startup hint."""

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080

DEFAULT_BASE_URL = "https://api.weather.gov"
DEFAULT_USER_AGENT = "weatherserver/0.1.0"
DEFAULT_DEADLINE_SECONDS = 2.0

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Kansas City, MO
SAMPLE_LAT = 39.0997
SAMPLE_LON = -94.5786
