"""
Centralized path configuration for the Config Dashboard backend
Ensures all modules use consistent, volume-mounted paths
"""

import os

# Base path for everything the backend persists. /app is the container layout.
APP_DIR = os.getenv('CONFIG_DASHBOARD_APP_DIR', '/app')

# For development/testing outside Docker
if not os.path.exists('/app') and 'CONFIG_DASHBOARD_APP_DIR' not in os.environ:
    # Running locally, relative to the current directory
    APP_DIR = '.'

# git runs with cwd=REPO_DIR, so every path handed to it must be absolute
APP_DIR = os.path.abspath(APP_DIR)

# Git working tree that is committed and pushed
REPO_DIR = os.path.abspath(os.getenv('CONFIG_DASHBOARD_REPO_DIR', os.path.join(APP_DIR, 'data')))

# One <name>.json file per document, inside the working tree
CONFIGS_DIR = os.path.abspath(os.getenv('CONFIG_DASHBOARD_CONFIGS_DIR', os.path.join(REPO_DIR, 'configs')))

# Persisted GitConfig. Kept outside the working tree: it may hold a token.
GIT_CONFIG_PATH = os.getenv(
    'CONFIG_DASHBOARD_GIT_CONFIG',
    os.path.join(APP_DIR, 'config', 'git-config.json'),
)

LOGS_DIR = os.getenv('CONFIG_DASHBOARD_LOG_DIR', os.path.join(APP_DIR, 'logs'))


def ensure_data_dirs():
    """Create data directories if they don't exist"""
    for directory in [REPO_DIR, CONFIGS_DIR, os.path.dirname(GIT_CONFIG_PATH)]:
        os.makedirs(directory, exist_ok=True)
