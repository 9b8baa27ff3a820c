"""
WeDeploy CLI Constants

Centralized constants for magic values, defaults, and configuration.
"""

# Remotes
DEFAULT_REMOTE = "wedeploy"
DEFAULT_INFRASTRUCTURE = "wedeploy.io"
DEFAULT_SERVICE_DOMAIN = "wedeploy.io"
LOCAL_REMOTE = "local"
LOCAL_INFRASTRUCTURE = "http://localhost"
LOCAL_SERVICE_DOMAIN = "wedeploy.me"
API_SUBDOMAIN_PREFIX = "https://api."
DASHBOARD_PREFIX = "console."

# Global configuration
CONFIG_FILENAME = ".we"
CONFIG_ENV_VAR = "WEDEPLOY_CONFIG"
LOGS_DIRNAME = ".we_logs"
USER_AGENT = "WeDeploy CLI/{version}"

# Local descriptors
PROJECT_DESCRIPTOR = "project.json"
SERVICE_DESCRIPTOR = "service.json"
LEGACY_SERVICE_DESCRIPTOR = "container.json"
NO_SERVICE_MARKER = ".noservice"
BUNDLE_IGNORED = [".git", ".we_logs", "__pycache__", ".DS_Store"]

# Upload headers
PACKAGE_SIZE_HEADER = "WeDeploy-Package-Size"
PACKAGE_SHA1_HEADER = "WeDeploy-Package-SHA1"
UPLOAD_FIELD = "pod"

# Timeouts (seconds)
DEFAULT_REQUEST_TIMEOUT = 30
ACTIVITIES_TIMEOUT = 5
LIST_TIMEOUT = 30
READINESS_TIMEOUT = 1
UPLOAD_TIMEOUT = 600

# Polling intervals (seconds)
ACTIVITIES_POLL_INTERVAL = 1
LIST_POOLING_INTERVAL = 1
LOGS_POLL_INTERVAL = 5
READINESS_MAX_ATTEMPTS = 100
READINESS_INTERVAL = 1
SHUTDOWN_GRACE_WINDOW = 60
LOGS_LIMIT = 9999

# Local infrastructure
LOCAL_IMAGE = "wedeploy/local"
LOCAL_IMAGE_TAG = "latest"
LOCAL_CONTAINER_NAME = "wedeploy-local"
LOCAL_LABEL = "com.wedeploy.local=true"
LOCAL_LABEL_FILTER = "label=com.wedeploy.local=true"
LOCAL_NETWORK_ALIASES = [
    "wedeploy.me",
    "api.wedeploy.me",
    "data.wedeploy.me",
    "auth.wedeploy.me",
]
LOCAL_PORTS = [80, 8080, 24224]
DEBUG_PORTS = [5001, 5005, 8001, 8500, 9200]
DOCKER_SOCKET = "/var/run/docker.sock"
LOCAL_NETWORK = "wedeploy"
HOST_IP_ENV_VAR = "WEDEPLOY_HOST_IP"

# Success Messages
SUCCESS_READY = "Ready! {service}.{project}.{domain}"
SUCCESS_PROJECT_CREATED = "New project {project} created"
SUCCESS_INFRA_READY = "WeDeploy is ready! {elapsed}"
SUCCESS_INFRA_STOPPED = "WeDeploy is stopped."

# Error Messages
ERROR_LIST_BANNER = "List of errors (format is container path: error)"
ERROR_LINK_BANNER = "Linking errors:"
ERROR_PORTS_UNAVAILABLE = (
    "Can not start. The following network ports must be available:\n{ports}\n"
    "Sometimes docker doesn't free up ports properly.\n"
    "If you don't know why these ports are not available, try restarting docker."
)
ERROR_NOT_SOCKET = (
    "DOCKER_HOST={host} is not a unix socket. "
    "Only local docker daemons are supported."
)
WARNING_READINESS_UNVERIFIED = (
    "Could not verify WeDeploy is up. The infrastructure may still be starting."
)
WARNING_CLEANUP_PARTIAL = (
    "WeDeploy was stopped, but some cleanup steps failed. Run \"we stop\" to retry."
)

# Shutdown Messages
SHUTDOWN_STARTED = "Stopping WeDeploy."
SHUTDOWN_PLEASE_WAIT = "Cleaning up running infrastructure. Please wait."
SHUTDOWN_GRACE_HINT = (
    "To kill this window (not recommended), try again in {seconds} seconds."
)
SHUTDOWN_FORCED = (
    "\"we run\" killed awkwardly. Use \"we stop\" to clean up leftover containers."
)
SHUTDOWN_UNEXPECTED = "Infrastructure terminated unexpectedly."

# Prompt answers
YES_ANSWERS = ["y", "yes", "yep", "yeh", "yeah"]
NO_ANSWERS = ["n", "no", "nah", "nope"]

# Host-flag incompatibilities
ERROR_REMOTE_WITH_HOST = (
    "incompatible use: --remote flag can not be used along host format with remote address"
)
ERROR_FLAGS_WITH_HOST = (
    "incompatible use: --project and --service are not allowed with host URL flag"
)
ERROR_SERVICE_WITHOUT_PROJECT = "incompatible use: --service requires --project"
