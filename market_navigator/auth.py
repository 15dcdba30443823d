"""
Market Navigator Authentication
===============================

Two independent credential spaces built on the same CredentialedSession:

  UserAuthManager    exporters and buyers      storage key: token
  AdminAuthManager   trade-data administrators storage key: adminToken

User flow:
1. initialize()             restore a stored session via GET /users/profile
2. sign_in() / sign_up()    exchange credentials, store the token
3. API calls carry the token; a 401 on the forum expires the session
4. sign_out()               drop token and cached user

Admin flow:
1. verify_token()           on entering an admin screen
2. login()                  returns a truthy/falsy AuthResult and shows a toast
3. logout()
"""

from typing import Optional, Dict, Any, Callable, Union

from market_navigator.api import NavigatorApi
from market_navigator.api_client import ApiClient
from market_navigator.exceptions import AuthenticationError
from market_navigator.logging_config import logger
from market_navigator.models import User, Admin, SignupData, ProfileUpdate
from market_navigator.notifications import Notifier
from market_navigator.session import (
    AuthResult,
    CredentialedSession,
    SessionSpec,
    SessionState,
)
from market_navigator.token_store import USER_TOKEN_KEY, ADMIN_TOKEN_KEY


USER_SESSION = SessionSpec(
    name="user",
    storage_key=USER_TOKEN_KEY,
    login_path="/auth/signin",
    verify_path="/users/profile",
    verify_method="GET",
    record_key="user",
    parse_record=User.from_payload,
    login_failure_message="Failed to sign in",
)

ADMIN_SESSION = SessionSpec(
    name="admin",
    storage_key=ADMIN_TOKEN_KEY,
    login_path="/admin-auth/login",
    verify_path="/admin-auth/verify",
    verify_method="POST",
    record_key="admin",
    parse_record=Admin.from_payload,
    login_failure_message="Invalid admin credentials",
    network_failure_message="Failed to login as admin",
)

SIGNUP_PATH = "/auth/signup"


class UserAuthManager:
    """
    Sign-in state of the exporter/buyer user.

    State is one of loading, anonymous, authenticated (see SessionState).
    Failures of sign_in/sign_up raise AuthenticationError with the
    backend's message and leave the current state untouched.
    """

    def __init__(
        self,
        client: ApiClient,
        navigate: Optional[Callable[[str], None]] = None,
        signin_path: str = "/auth/signin"
    ):
        self.session: CredentialedSession[User] = CredentialedSession(USER_SESSION, client)
        self.api = NavigatorApi(client)
        self.navigate = navigate
        self.signin_path = signin_path

    # ==================== State ====================

    @property
    def user(self) -> Optional[User]:
        return self.session.record

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def loading(self) -> bool:
        return self.session.state == SessionState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    def watch(self, client: ApiClient) -> None:
        """Become the authentication-expired listener of a client sharing our token"""
        if client.token_store.key != USER_SESSION.storage_key:
            raise ValueError("Only clients bound to the user token can expire the user session")
        client.subscribe_session_expired(self._on_session_expired)

    def _on_session_expired(self) -> None:
        self.session.expire()
        logger.log_auth_event("user_session_expired", False, reason="token rejected")
        if self.navigate is not None:
            self.navigate(self.signin_path)

    # ==================== Lifecycle ====================

    async def initialize(self) -> Optional[User]:
        """Restore a stored session; returns the user or None"""
        result = await self.session.restore()
        return result.record

    async def sign_in(self, email: str, password: str) -> User:
        result = await self.session.login({"email": email, "password": password})
        return result.unwrap()

    async def sign_up(self, data: SignupData) -> User:
        result = await self.session.login(
            data.to_payload(),
            path=SIGNUP_PATH,
            default_message="Failed to sign up",
        )
        return result.unwrap()

    def sign_out(self) -> None:
        self.session.logout()
        logger.log_auth_event("user_signout", True)

    def update_user(self, partial: Dict[str, Any]) -> Optional[User]:
        """Merge fields into the cached user (no network)"""
        return self.session.merge_record(partial)

    async def update_profile(self, fields: Union[ProfileUpdate, Dict[str, Any]]) -> User:
        """PUT /users/profile, then refresh the cached user from the answer"""
        if self.user is None:
            raise AuthenticationError("Sign in to update your profile")

        payload = fields.to_payload() if isinstance(fields, ProfileUpdate) else dict(fields)
        if not payload:
            raise ValueError("No profile fields to update")

        response = await self.api.update_user_profile(payload)
        returned = response.get("user") if isinstance(response, dict) else None
        # Backend may only acknowledge; then the submitted fields are canonical
        return self.update_user(returned if isinstance(returned, dict) else payload)


class AdminAuthManager:
    """
    Admin sign-in for the trade-data screens.

    login() and verify_token() never raise for rejected credentials;
    they return an AuthResult that is falsy on failure, and login()
    reports the outcome through the Notifier.
    """

    def __init__(self, client: ApiClient, notifier: Optional[Notifier] = None):
        self.session: CredentialedSession[Admin] = CredentialedSession(ADMIN_SESSION, client)
        self.notifier = notifier or Notifier()

    @property
    def admin(self) -> Optional[Admin]:
        return self.session.record

    @property
    def is_loading(self) -> bool:
        return self.session.busy

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    async def login(self, admin_id: str, password: str) -> AuthResult[Admin]:
        result = await self.session.login({"adminId": admin_id, "password": password})
        if result:
            self.notifier.success("Admin login successful")
        else:
            self.notifier.error(result.message)
        return result

    async def verify_token(self) -> AuthResult[Admin]:
        """False at once (no request) when no admin token is stored"""
        return await self.session.restore()

    def logout(self) -> None:
        self.session.logout()
        self.notifier.success("Admin logged out successfully")
