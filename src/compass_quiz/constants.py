"""Quiz constants shared across the SDK.

Several values can be overridden via environment variables so that
deployments can tune submission behaviour without code changes.
"""

import os

# Earliest accepted birth year for the year-input question.
MIN_BIRTH_YEAR = int(os.getenv("MIN_BIRTH_YEAR", "1900"))

# Phone numbers need at least this many digits once non-digits are stripped.
MIN_PHONE_DIGITS = int(os.getenv("MIN_PHONE_DIGITS", "8"))

# Seconds to wait for the lead sink before reporting a timeout.
SUBMIT_TIMEOUT_SECONDS = float(os.getenv("SUBMIT_TIMEOUT_SECONDS", "10"))

# Source tag stamped on every lead payload.
LEAD_SOURCE = os.getenv("LEAD_SOURCE", "cosmic-compass-py")

# Sub-scale risk threshold: anxiety (phq1+phq2) or depression (phq3+phq4).
SUBSCALE_RISK_THRESHOLD = 3

# Youth referral window, inclusive on both ends.
YOUTH_MIN_AGE = 12
YOUTH_MAX_AGE = 25

# Referral route ids.
ROUTE_YOUTH = "samh"
ROUTE_ADULT = "comit"
ROUTE_DEFAULT = "limitless"

# User-facing submission messages.
INVALID_CONTACT_MESSAGE = "Please provide a valid email or phone number."
SUBMIT_IN_PROGRESS_MESSAGE = "Your details are already being submitted."
SUBMIT_TIMEOUT_MESSAGE = "Submission timed out. Please try again."
SINK_FAILURE_MESSAGE = "Failed to save contact information. Please try again."

# Default catalog identifiers, used when scoring helpers are called
# without a loaded catalog.  They match v1/catalog/.
SCREENING_ITEM_IDS: tuple[str, ...] = ("phq1", "phq2", "phq3", "phq4")
FLAVOR_PRIORITY: tuple[str, ...] = ("fire", "ice", "water", "air")
YEAR_QUESTION_ID = "yob"
CATEGORY_QUESTION_ID = "nat"
LOCAL_CATEGORY = "sg"
