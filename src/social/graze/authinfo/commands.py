"""Queries, commands and results handled by the auth info store.

Handlers return their result and also set it on the query's ``result`` attribute, so the
same objects work when calling the store directly and when dispatching through a
``HandlerRegistry``.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from social.graze.authinfo.model.user_auth import UserAuth


class OAuthToken(BaseModel):
    """Token set returned by an OAuth provider.

    ``raw`` holds the provider's extra response fields, such as ``id_token``.
    """

    access_token: str = ""
    refresh_token: str = ""
    token_type: str = ""
    expiry: Optional[datetime] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    def extra(self, key: str) -> Any:
        return self.raw.get(key)


@dataclass(repr=False, eq=False)
class ExternalUserInfo:
    """A local user's profile merged with their most recent external identity."""
    user_id: int
    login: str
    email: str
    name: str
    is_disabled: bool
    auth_module: str
    auth_id: str


@dataclass
class GetExternalUserInfoByLoginQuery:
    login_or_email: str
    result: Optional[ExternalUserInfo] = None


@dataclass
class GetAuthInfoQuery:
    user_id: int = 0
    auth_module: str = ""
    auth_id: str = ""
    result: Optional[UserAuth] = None


@dataclass
class SetAuthInfoCommand:
    user_id: int
    auth_module: str
    auth_id: str
    o_auth_token: Optional[OAuthToken] = None


@dataclass
class UpdateAuthInfoCommand:
    user_id: int
    auth_module: str
    auth_id: str
    o_auth_token: Optional[OAuthToken] = None


@dataclass
class DeleteAuthInfoCommand:
    user_auth: UserAuth
