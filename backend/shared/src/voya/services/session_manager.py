"""Session manager for Cognito email/password authentication.

Holds the current session of one client, refreshes expired tokens, notifies
listeners of auth changes and owns the user's application profile (created
on first fetch).
"""

import base64
import datetime as dt
import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, NoReturn

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from voya.models.enums import SessionEvent, UserRole
from voya.models.errors import AuthenticationError, ErrorCode
from voya.models.profile import AuthUser, Profile, ProfileUpdate, Session, SignUpResult
from voya.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .storage_service import StorageService

logger = get_logger(__name__)

# Cognito errors caused by what the user typed
CREDENTIAL_ERRORS = frozenset(
    {
        "NotAuthorizedException",
        "UserNotFoundException",
        "UsernameExistsException",
        "InvalidPasswordException",
        "UserNotConfirmedException",
    }
)

# Refresh this long before the real expiry
EXPIRY_SKEW = dt.timedelta(seconds=30)

# Sign-up metadata key -> Cognito attribute
METADATA_ATTRIBUTES = {
    "first_name": "given_name",
    "last_name": "family_name",
    "role": "custom:role",
}

SessionCallback = Callable[[SessionEvent, Session | None], None]


def decode_jwt_claims(token: str) -> dict[str, Any]:
    """Decode the payload of a JWT without verifying it.

    Tokens come straight from Cognito over TLS; the API gateway verifies
    signatures on inbound requests.

    Args:
        token: JWT string (header.payload.signature)

    Returns:
        Claims dict, empty if the token is malformed
    """
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    payload = parts[1]
    padding = 4 - len(payload) % 4
    if padding != 4:
        payload += "=" * padding
    try:
        claims: dict[str, Any] = json.loads(base64.urlsafe_b64decode(payload))
    except ValueError:
        return {}
    return claims


class SessionListener:
    """Registration handle returned by ``on_session_change``.

    Usable as a context manager; leaving the block unsubscribes.
    """

    def __init__(self, manager: "SessionManager", callback: SessionCallback) -> None:
        self._manager = manager
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._manager._remove_listener(self)
            self.active = False

    def __enter__(self) -> "SessionListener":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class SessionManager:
    """Current-user state container.

    Args:
        user_pool_id: Cognito User Pool ID
        client_id: Cognito App Client ID (must allow USER_PASSWORD_AUTH)
        db: DynamoDB service holding the profiles table
        storage: Storage service for avatar uploads
        client: Pre-built cognito-idp client (tests)
        region_name: AWS region for the default client
        clock: Returns the current UTC time
    """

    PROFILES_TABLE = "profiles"

    def __init__(
        self,
        user_pool_id: str,
        client_id: str,
        db: "DynamoDBService",
        storage: "StorageService | None" = None,
        client: Any | None = None,
        region_name: str | None = None,
        clock: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.user_pool_id = user_pool_id
        self.client_id = client_id
        self.db = db
        self.storage = storage
        self._cognito = client or boto3.client("cognito-idp", region_name=region_name)
        self._clock = clock or (lambda: dt.datetime.now(dt.UTC))
        self._session: Session | None = None
        self._profile: Profile | None = None
        self._listeners: list[SessionListener] = []

    @property
    def profile(self) -> Profile | None:
        return self._profile

    # Auth operations

    def sign_up(
        self, email: str, password: str, metadata: dict[str, str] | None = None
    ) -> SignUpResult:
        """Register a new user.

        Raises:
            AuthenticationError: If Cognito rejects the registration.
        """
        attributes = [{"Name": "email", "Value": email}]
        for key, value in (metadata or {}).items():
            if key in METADATA_ATTRIBUTES and value:
                attributes.append({"Name": METADATA_ATTRIBUTES[key], "Value": value})

        try:
            response = self._cognito.sign_up(
                ClientId=self.client_id,
                Username=email,
                Password=password,
                UserAttributes=attributes,
            )
        except (ClientError, BotoCoreError) as e:
            raise self._auth_error("sign_up", e) from e

        logger.info("Signed up user %s", response["UserSub"])
        return SignUpResult(
            user_id=response["UserSub"],
            email=email,
            confirmed=bool(response.get("UserConfirmed", False)),
        )

    def sign_in(self, email: str, password: str) -> Session:
        """Authenticate with email and password and make it the current session.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        try:
            response = self._cognito.initiate_auth(
                AuthFlow="USER_PASSWORD_AUTH",
                ClientId=self.client_id,
                AuthParameters={"USERNAME": email, "PASSWORD": password},
            )
        except (ClientError, BotoCoreError) as e:
            raise self._auth_error("sign_in", e) from e

        result = response.get("AuthenticationResult")
        if not result:
            # Challenges (MFA, new password) are not supported by this client
            raise AuthenticationError(
                code=ErrorCode.INVALID_CREDENTIALS,
                details={"challenge": response.get("ChallengeName", "unknown")},
            )

        session = self._session_from_result(result)
        self._session = session
        self._profile = None
        logger.info("User %s signed in", session.user.id)
        self._emit(SessionEvent.SIGNED_IN)
        return session

    def sign_out(self) -> None:
        """Revoke the tokens and clear the session entirely.

        The local session is cleared even when revocation fails.
        """
        session = self._session
        if session is None:
            return
        try:
            self._cognito.global_sign_out(AccessToken=session.access_token)
        except (ClientError, BotoCoreError) as e:
            logger.warning("Token revocation failed for %s: %s", session.user.id, e)
        self._session = None
        self._profile = None
        logger.info("User %s signed out", session.user.id)
        self._emit(SessionEvent.SIGNED_OUT)

    def get_current_session(self) -> Session | None:
        """Current session, refreshed first if its tokens expired.

        Raises:
            AuthenticationError: SESSION_EXPIRED if the refresh failed; the
                session is cleared.
        """
        session = self._session
        if session is None:
            return None
        if self._clock() < session.expires_at - EXPIRY_SKEW:
            return session
        return self._refresh(session)

    def require_session(self) -> Session:
        """Current session or AUTH_REQUIRED."""
        session = self.get_current_session()
        if session is None:
            raise AuthenticationError()
        return session

    def restore_session(self, access_token: str, refresh_token: str | None = None) -> Session:
        """Adopt tokens issued earlier (e.g. persisted by a client).

        Raises:
            AuthenticationError: If Cognito no longer accepts the access token.
        """
        try:
            response = self._cognito.get_user(AccessToken=access_token)
        except (ClientError, BotoCoreError) as e:
            raise self._auth_error("restore_session", e) from e

        attributes = {a["Name"]: a["Value"] for a in response.get("UserAttributes", [])}
        claims = decode_jwt_claims(access_token)
        if "exp" in claims:
            expires_at = dt.datetime.fromtimestamp(int(claims["exp"]), dt.UTC)
        else:
            expires_at = self._clock() + dt.timedelta(hours=1)

        session = Session(
            user=self._user_from_claims(attributes, fallback_id=response.get("Username", "")),
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )
        self._session = session
        self._profile = None
        self._emit(SessionEvent.SIGNED_IN)
        return session

    def on_session_change(self, callback: SessionCallback) -> SessionListener:
        """Register ``callback(event, session)`` for auth changes."""
        listener = SessionListener(self, callback)
        self._listeners.append(listener)
        return listener

    # Profile operations

    def fetch_profile(self) -> Profile:
        """Profile of the signed-in user, created from sign-up metadata on first use.

        Raises:
            AuthenticationError: If nobody is signed in.
        """
        session = self.require_session()
        item = self.db.get_item(self.PROFILES_TABLE, {"id": session.user.id})
        if item:
            self._profile = self._item_to_profile(item)
            return self._profile

        metadata = session.user.metadata
        now = self._clock()
        try:
            role = UserRole(metadata.get("role", UserRole.TRAVELER.value))
        except ValueError:
            role = UserRole.TRAVELER
        profile = Profile(
            id=session.user.id,
            email=session.user.email,
            first_name=metadata.get("first_name", ""),
            last_name=metadata.get("last_name", ""),
            role=role,
            created_at=now,
            updated_at=now,
        )
        # A concurrent first login may have created it already
        created = self.db.put_item(
            self.PROFILES_TABLE,
            self._profile_to_item(profile),
            condition_expression="attribute_not_exists(id)",
        )
        if not created:
            item = self.db.get_item(self.PROFILES_TABLE, {"id": session.user.id})
            if item:
                profile = self._item_to_profile(item)
        else:
            logger.info("Created profile for %s", profile.id)
        self._profile = profile
        return profile

    def update_profile(self, updates: ProfileUpdate) -> Profile:
        """Apply the provided fields to the signed-in user's profile.

        Raises:
            AuthenticationError: If nobody is signed in.
        """
        profile = self._profile or self.fetch_profile()
        fields = updates.model_dump(exclude_none=True)
        if not fields:
            return profile
        fields["updated_at"] = self._clock()

        attrs = self.db.update_fields(self.PROFILES_TABLE, {"id": profile.id}, fields)
        self._profile = self._item_to_profile(attrs) if attrs else profile.model_copy(update=fields)
        self._emit(SessionEvent.USER_UPDATED)
        return self._profile

    def upload_avatar(self, filename: str, data: bytes, content_type: str) -> Profile:
        """Store an avatar image and point the profile at it.

        Raises:
            AuthenticationError: If nobody is signed in.
            StoreError: If the upload failed.
        """
        if self.storage is None:
            raise RuntimeError("SessionManager was created without a storage service")
        session = self.require_session()
        url = self.storage.upload_avatar(session.user.id, filename, data, content_type)
        return self.update_profile(ProfileUpdate(avatar_url=url))

    # Internals

    def _refresh(self, session: Session) -> Session:
        if not session.refresh_token:
            self._expire(session)
        try:
            response = self._cognito.initiate_auth(
                AuthFlow="REFRESH_TOKEN_AUTH",
                ClientId=self.client_id,
                AuthParameters={"REFRESH_TOKEN": session.refresh_token},
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning("Token refresh failed for %s: %s", session.user.id, e)
            self._expire(session)

        refreshed = self._session_from_result(
            response["AuthenticationResult"], previous=session
        )
        self._session = refreshed
        logger.info("Refreshed session for %s", refreshed.user.id)
        self._emit(SessionEvent.TOKEN_REFRESHED)
        return refreshed

    def _expire(self, session: Session) -> NoReturn:
        self._session = None
        self._profile = None
        self._emit(SessionEvent.SIGNED_OUT)
        raise AuthenticationError(
            code=ErrorCode.SESSION_EXPIRED, details={"user_id": session.user.id}
        )

    def _session_from_result(
        self, result: dict[str, Any], previous: Session | None = None
    ) -> Session:
        id_token = result.get("IdToken") or (previous.id_token if previous else None)
        claims = decode_jwt_claims(id_token) if id_token else {}
        if claims:
            user = self._user_from_claims(claims)
        elif previous is not None:
            user = previous.user
        else:
            raise AuthenticationError(details={"reason": "missing_id_token"})

        return Session(
            user=user,
            access_token=result["AccessToken"],
            id_token=id_token,
            # REFRESH_TOKEN_AUTH does not return a new refresh token
            refresh_token=result.get("RefreshToken")
            or (previous.refresh_token if previous else None),
            expires_at=self._clock() + dt.timedelta(seconds=int(result.get("ExpiresIn", 3600))),
        )

    def _user_from_claims(self, claims: dict[str, Any], fallback_id: str = "") -> AuthUser:
        metadata = {
            key: str(claims[attribute])
            for key, attribute in METADATA_ATTRIBUTES.items()
            if claims.get(attribute)
        }
        return AuthUser(
            id=str(claims.get("sub") or fallback_id),
            email=str(claims.get("email", "")),
            metadata=metadata,
        )

    def _auth_error(self, operation: str, exc: Exception) -> AuthenticationError:
        if isinstance(exc, ClientError):
            aws_code = exc.response.get("Error", {}).get("Code", "Unknown")
        else:
            aws_code = type(exc).__name__
        logger.warning("Cognito %s failed: %s", operation, aws_code)
        code = ErrorCode.INVALID_CREDENTIALS if aws_code in CREDENTIAL_ERRORS else ErrorCode.AUTH_REQUIRED
        return AuthenticationError(code=code, details={"operation": operation, "aws_error": aws_code})

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener.callback(event, self._session)
            except Exception:
                logger.exception("Session listener failed on %s", event.value)

    def _remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _profile_to_item(self, profile: Profile) -> dict[str, Any]:
        return {
            "id": profile.id,
            "email": profile.email,
            "first_name": profile.first_name,
            "last_name": profile.last_name,
            "role": profile.role.value,
            "phone": profile.phone,
            "avatar_url": profile.avatar_url,
            "created_at": profile.created_at.isoformat(),
            "updated_at": profile.updated_at.isoformat(),
        }

    def _item_to_profile(self, item: dict[str, Any]) -> Profile:
        return Profile(
            id=item["id"],
            email=item["email"],
            first_name=item.get("first_name", ""),
            last_name=item.get("last_name", ""),
            role=UserRole(item.get("role", UserRole.TRAVELER.value)),
            phone=item.get("phone"),
            avatar_url=item.get("avatar_url"),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
            updated_at=dt.datetime.fromisoformat(item["updated_at"]),
        )
