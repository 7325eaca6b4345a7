from __future__ import annotations

# Local queries (tool lookups, docker inspect/tag/rmi)
LOCAL_TIMEOUT_SECONDS = 60.0

# Registry and remote build operations
DOCKER_LOAD_TIMEOUT_SECONDS = 10 * 60.0
DOCKER_PUSH_TIMEOUT_SECONDS = 30 * 60.0
GCLOUD_SUBMIT_TIMEOUT_SECONDS = 10 * 60.0

# Changelog generation queries the code host for every PR since the last tag.
CHANGELOG_TIMEOUT_SECONDS = 60 * 60.0
