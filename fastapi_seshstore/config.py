from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ModelWrapValidatorHandler,
    PrivateAttr,
    ValidationInfo,
    field_validator,
    model_validator,
)

from fastapi_seshstore.backends import SessionStore, StoreName, resolve_store
from fastapi_seshstore.models import ConfigDiagnostic, SamesiteOptions

MISSING_SECRET_WARNING = (
    'There was no "secret" configured for the session middleware! This poses a '
    "security vulnerability because session data will be stored on clients without "
    "any server-side verification that it has not been tampered with. It is strongly "
    "recommended that you set a secret to prevent exploits that may be attempted "
    "using carefully crafted cookies."
)


class SessionConfig(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    _store_name: str | None = PrivateAttr(default=None)

    secret: Annotated[
        str | None,
        Field(
            description="Secret key used to sign session cookies.",
            title="Secret",
        ),
    ] = None

    name: Annotated[
        str,
        Field(
            description="Name of the session cookie.",
            title="Cookie Name",
            min_length=1,
        ),
    ] = "_session"

    path: Annotated[
        str,
        Field(
            description="Path attribute of the session cookie.",
            title="Path",
        ),
    ] = "/"

    domain: Annotated[
        str | None,
        Field(
            description="Domain for which the cookie is valid. If None, the cookie is valid for the current domain.",
            title="Domain",
        ),
    ] = None

    secure: Annotated[
        bool,
        Field(
            description="Whether the cookie is secure (HTTPS only).",
            title="Secure",
        ),
    ] = False

    http_only: Annotated[
        bool,
        Field(
            description="Whether the cookie is HTTP only (not accessible via JavaScript).",
            title="HTTP Only",
        ),
    ] = True

    samesite: Annotated[
        SamesiteOptions | None,
        Field(
            description="SameSite attribute of the cookie, None omits it.",
            title="SameSite",
        ),
    ] = "lax"

    expire_after: Annotated[
        int,
        Field(
            description="Seconds after which sessions expire. 0 means no expiration.",
            title="Expire After",
            ge=0,
        ),
    ] = 0

    store_options: Annotated[
        dict[str, Any],
        Field(
            default_factory=dict,
            description="Keyword arguments for the store when it is given by name.",
            title="Store Options",
        ),
    ]

    store: Annotated[
        SessionStore | StoreName,
        Field(
            description="Store instance, or the registered name of one, used to persist sessions.",
            title="Session Store",
            validate_default=True,
        ),
    ] = "cookie"

    @field_validator("store", mode="after")
    @classmethod
    def _resolve_store(cls, store: SessionStore | str, info: ValidationInfo) -> SessionStore:
        options = dict(info.data.get("store_options", {}))
        expire_after = options.pop("expire_after", info.data.get("expire_after", 0))
        return resolve_store(store, expire_after=expire_after, **options)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_store_name(cls, data: Any, handler: ModelWrapValidatorHandler) -> "SessionConfig":
        config = handler(data)
        if isinstance(data, dict):
            store = data.get("store", "cookie")
            if isinstance(store, str):
                config._store_name = store
        return config

    @classmethod
    def coerce(cls, config: "SessionConfig | str | None" = None, **options: Any) -> "SessionConfig":
        """
        Builds a config from a config object, a bare secret string or keyword options.
        """
        if isinstance(config, SessionConfig):
            if not options:
                return config
            values = {**dict(config), **options}
            if "store" not in options and config._store_name is not None:
                # rebuild a named store so it picks up the merged options
                values["store"] = config._store_name
            return cls(**values)

        if isinstance(config, str):
            options.setdefault("secret", config)

        return cls(**options)

    @property
    def session_store(self) -> SessionStore:
        return self.store  # type: ignore[return-value]

    def validate_security(self) -> list[ConfigDiagnostic]:
        diagnostics: list[ConfigDiagnostic] = []
        if not self.secret:
            diagnostics.append(
                ConfigDiagnostic(
                    level="warning",
                    code="missing_secret",
                    message=MISSING_SECRET_WARNING,
                )
            )
        return diagnostics
