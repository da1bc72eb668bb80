"""
Audit trail for the Config Dashboard.

Records who changed the git configuration and which documents were deleted
or uploaded with upload-to-git. One JSON object per line in
<logs>/security_audit.log, separate from the application log.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from fastapi import Request

AUDIT_LOG_NAME = 'security_audit.log'

# Actions that replace state other users rely on
HIGH_IMPACT_ACTIONS = frozenset({'SAVE_GIT_CONFIG', 'DELETE_DOCUMENT'})


class SecurityAuditLogger:
    """
    Writes audit entries to the `security_audit` logger.

    The rotating file handler is attached on the first entry, so importing
    this module never touches the filesystem. If the log directory is not
    writable, entries fall through to the application log instead.
    """

    def __init__(self, log_dir: Optional[str] = None):
        self.logger = logging.getLogger('security_audit')
        self._log_dir = log_dir
        self._configured = False

    def _configure(self) -> None:
        if self._configured:
            return
        self._configured = True

        from config.paths import LOGS_DIR
        log_dir = self._log_dir or LOGS_DIR
        try:
            os.makedirs(log_dir, mode=0o700, exist_ok=True)
            handler = RotatingFileHandler(
                os.path.join(log_dir, AUDIT_LOG_NAME),
                maxBytes=10*1024*1024,  # 10MB, 14 backups like the app log
                backupCount=14,
                encoding='utf-8'
            )
        except OSError as e:
            logging.getLogger(__name__).warning(f"Audit log file unavailable, writing to application log: {e}")
            return

        handler.setFormatter(logging.Formatter('%(asctime)s - AUDIT - %(levelname)s - %(message)s'))
        self.logger.addHandler(handler)
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False

    def record(
        self,
        action: str,
        target: str,
        success: bool,
        client_ip: str = 'unknown',
        user_agent: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Write one audit entry. Failed attempts are logged at WARNING."""
        self._configure()
        action = action.upper()
        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'action': action,
            'target': target,
            'success': success,
            'impact': 'high' if action in HIGH_IMPACT_ACTIONS else 'normal',
            'client_ip': client_ip,
            'user_agent': user_agent or 'unknown',
        }
        if extra:
            entry.update(extra)

        level = logging.INFO if success else logging.WARNING
        self.logger.log(level, json.dumps(entry, default=str))


security_audit = SecurityAuditLogger()


def log_privileged_action(request: Request, action: str, target: str, success: bool = True) -> None:
    """Audit an API action, taking the client address and agent from the request."""
    security_audit.record(
        action,
        target,
        success,
        client_ip=request.client.host if request.client else 'unknown',
        user_agent=request.headers.get('user-agent'),
    )
