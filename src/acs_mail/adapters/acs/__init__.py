"""Communication Services adapter - REST and SMTP email delivery.

Structure:
    * :mod:`.config` - AcsConfig model and loader
    * :mod:`.credentials` - Credential provider (azure-identity)
    * :mod:`.rest` - REST delivery engine (httpx)
    * :mod:`.smtp` - SMTP delivery engine (smtplib)
    * :mod:`.transport` - Transport selector
    * :mod:`.validation` - Message validation
"""

from __future__ import annotations

from .config import AcsConfig, load_acs_config_from_dict
from .credentials import COMMUNICATION_SCOPE, build_token_source, fetch_access_token, resolve_auth_material
from .rest import API_VERSION, RestSettings, StatusReport, get_email_status, send_via_rest
from .smtp import SmtpSettings, send_via_smtp
from .transport import send
from .validation import validate_message, validate_recipient, validate_recipients

__all__ = [
    "API_VERSION",
    "AcsConfig",
    "COMMUNICATION_SCOPE",
    "RestSettings",
    "SmtpSettings",
    "StatusReport",
    "build_token_source",
    "fetch_access_token",
    "get_email_status",
    "load_acs_config_from_dict",
    "resolve_auth_material",
    "send",
    "send_via_rest",
    "send_via_smtp",
    "validate_message",
    "validate_recipient",
    "validate_recipients",
]
