"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Well-known unit paths
# ------------------------------------------------------------------

PATH_ALT_GND = "airstate/alt GND"
PATH_ALT_MSL = "airstate/alt MSL"
PATH_AIRSPEED = "airstate/airspeed"
PATH_CLIMB = "airstate/climb"
PATH_THROTTLE = "airstate/throttle"
PATH_LAT = "airstate/lat"
PATH_LON = "airstate/lon"
PATH_BATTERY_VOLTAGE = "power/battery_voltage"
PATH_BATTERY_CURRENT = "power/battery_current"
PATH_AUTOPILOT_LOAD = "computer/autopilot_load"
PATH_THROUGHPUT = "radio/throughput"

PATH_FLIGHTBOOK_EVENTS = "flightbook/takeoff_landing"
PATH_FLIGHTBOOK_NFLIGHTS = "flightbook/number flights"
PATH_FLIGHTBOOK_FLIGHTTIME = "flightbook/total flight time"
PATH_FLIGHTBOOK_FIRST_TAKEOFF = "flightbook/first takeoff"
PATH_FLIGHTBOOK_LAST_LANDING = "flightbook/last landing"

PATH_POWER = "power/power"
PATH_INST_CONSUMPTION = "power/inst. consumption"
PATH_INST_CHARGE = "power/inst. charge"
PATH_CUM_CONSUMPTION = "power/cum. consumption"
PATH_CUM_CHARGE = "power/cum. charge"

PATH_GLIDE_HDIST = "glideperf/cum. horz. dist."
PATH_GLIDE_GROUNDSPEED = "glideperf/groundspeed"
PATH_GLIDE_WIND_DIR = "glideperf/wind direction"
PATH_GLIDE_WIND_SPEED = "glideperf/wind speed"
PATH_GLIDE_WIND_REL = "glideperf/relative wind angle"
PATH_GLIDE_HEADWIND = "glideperf/head wind"
PATH_GLIDE_AIRSPEED_EST = "glideperf/airspeed estimate"
PATH_GLIDE_RATIO = "glideperf/glide ratio"
PATH_GLIDE_RATIO_AVG = "glideperf/glide ratio 5sec avg"

# Suffix of the snapshot kept when a unit's timestamps are rewritten.
ORIG_SUFFIX = "_orig"

# ------------------------------------------------------------------
# MAVLink base-mode flags
# ------------------------------------------------------------------

MODE_FLAG_SAFETY_ARMED = 0x80
MODE_FLAG_MANUAL_INPUT_ENABLED = 0x40
MODE_FLAG_STABILIZE_ENABLED = 0x10
MODE_FLAG_GUIDED_ENABLED = 0x08

# Link throughput is accumulated in bytes and reported in kbit/s per update.
BYTES_PER_KBIT = 128.0

# Raw timestamps in a calendar year after this are treated as absolute.
ABSOLUTE_TIME_MIN_YEAR = 2000

USEC_PER_SEC = 1_000_000
