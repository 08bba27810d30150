from __future__ import annotations

import logging
import secrets
from typing import Dict, Iterable, Optional, Tuple

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .errors import AuthenticationError
from .models import User

logger = logging.getLogger(__name__)

_security = HTTPBasic(auto_error=False)


# PUBLIC_INTERFACE
class UserDirectory:
    """
    The users allowed to sign in, with their passwords.

    Ids are assigned 1..n in the order the users are given.
    """

    def __init__(self, credentials: Iterable[Tuple[str, str]]) -> None:
        self._users: Dict[str, Tuple[User, str]] = {}
        for name, password in credentials:
            if name not in self._users:
                self._users[name] = (User(id=len(self._users) + 1, name=name), password)

    def __len__(self) -> int:
        return len(self._users)

    def authenticate(self, name: str, password: str) -> Optional[User]:
        """Return the user if the name/password pair is valid, otherwise None."""
        entry = self._users.get(name)
        if entry is None:
            return None
        user, expected = entry
        if not secrets.compare_digest(password.encode(), expected.encode()):
            return None
        return user


# PUBLIC_INTERFACE
def get_current_user(
    request: Request,
    creds: Optional[HTTPBasicCredentials] = Depends(_security),
) -> User:
    """
    FastAPI dependency resolving the request's HTTP Basic credentials to a User.

    Raises:
        AuthenticationError (401) if credentials are missing or invalid.
    """
    if creds is None:
        raise AuthenticationError()

    directory: UserDirectory = request.app.state.users
    user = directory.authenticate(creds.username, creds.password)
    if user is None:
        logger.debug("Rejected credentials for user=%s", creds.username)
        raise AuthenticationError("Invalid authentication credentials")
    return user
