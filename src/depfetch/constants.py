"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    RESOLUTION_ERROR = 2
    MATERIALIZATION_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    MAVEN_CENTRAL_ID = "central"
    MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2"
    DEFAULT_LOCAL_REPOSITORY = "~/.m2/repository"
    POM_XML_FILE = "pom.xml"
    METADATA_FILE = "maven-metadata.xml"
    # Output directory of an in-progress build, relative to its pom.xml
    BUILD_OUTPUT_DIR = "target/classes"
    SNAPSHOT_SUFFIX = "-SNAPSHOT"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "DEPFETCH_LOG_LEVEL"
    ENV_CONFIG = "DEPFETCH_CONFIG"
    ENV_LOCAL_REPOSITORY = "DEPFETCH_LOCAL_REPOSITORY"
    ENV_OFFLINE = "DEPFETCH_OFFLINE"

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    DOWNLOAD_CHUNK_SIZE = 65536
