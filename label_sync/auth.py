"""
auth.py - Authentication strategy for the GitHub API

Either a GitHub App installation (app id, private key, installation id)
or a plain access token. The app identity wins when it is complete.
"""

import logging
from dataclasses import dataclass
from typing import Union

import requests
from github import Auth, BadCredentialsException, GithubException, GithubIntegration
from jwt.exceptions import PyJWTError

from .errors import AuthError, ConfigError, NotFoundError, TransientError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppCredentials:
    app_id: str
    private_key: str
    installation_id: int

    def __repr__(self):
        return f"AppCredentials(app_id={self.app_id!r}, installation_id={self.installation_id!r})"


@dataclass(frozen=True)
class AccessToken:
    token: str

    def __repr__(self):
        return "AccessToken(token=***)"


AuthStrategy = Union[AppCredentials, AccessToken]


def resolve_auth_strategy(app_id=None, private_key=None, installation_id=None, token=None) -> AuthStrategy:
    """
    Pick how to authenticate from whatever credentials were supplied
    Raises ConfigError when neither strategy is complete
    """
    app_parts = {
        "app id": app_id,
        "app private key": private_key,
        "app installation id": installation_id,
    }
    if all(app_parts.values()):
        try:
            installation = int(installation_id)
        except (TypeError, ValueError):
            raise ConfigError(f"App installation id must be a number, got '{installation_id}'")
        # Keys passed through env vars often carry escaped newlines
        key = private_key.replace("\\n", "\n")
        return AppCredentials(app_id=str(app_id), private_key=key, installation_id=installation)

    if token:
        return AccessToken(token=token)

    given = [name for name, value in app_parts.items() if value]
    if given:
        missing = [name for name, value in app_parts.items() if not value]
        raise ConfigError(
            f"Incomplete GitHub App credentials: {', '.join(missing)} missing and no token given"
        )
    raise ConfigError("No credentials given. Provide either a token or app id, app private key and app installation id")


def get_token(strategy, api_url):
    """
    Get a bearer token for the GraphQL API
    For app credentials this mints an installation access token
    """
    if isinstance(strategy, AccessToken):
        return strategy.token

    logger.debug(f"Requesting installation token for app {strategy.app_id} (installation {strategy.installation_id})")
    try:
        integration = GithubIntegration(
            auth=Auth.AppAuth(strategy.app_id, strategy.private_key),
            base_url=api_url,
        )
        return integration.get_access_token(strategy.installation_id).token
    except BadCredentialsException as e:
        raise AuthError(f"GitHub App {strategy.app_id} authentication failed: {e}")
    except GithubException as e:
        if e.status == 404:
            raise NotFoundError(
                f"Installation {strategy.installation_id} not found for GitHub App {strategy.app_id}"
            )
        if e.status in (401, 403):
            raise AuthError(f"GitHub App {strategy.app_id} authentication failed: {e}")
        raise TransientError(f"Could not get installation token for GitHub App {strategy.app_id}: {e}")
    except requests.RequestException as e:
        raise TransientError(f"Could not reach {api_url} for an installation token: {e}")
    except (PyJWTError, ValueError) as e:
        # jwt rejects a malformed private key
        raise AuthError(f"Invalid private key for GitHub App {strategy.app_id}: {e}")
