"""Backend runtime control utility

Builds the session, repository and engine from configuration and provides
startup, stop and status query logic shared by the FastAPI app and the CLI.
"""

from __future__ import annotations

import atexit
from typing import Any, Dict, Optional

from notiapp_backend.config.loader import ConfigLoader, get_config
from notiapp_backend.core.engine import ScheduleEngine
from notiapp_backend.core.errors import AuthError
from notiapp_backend.core.logger import get_logger, setup_logging
from notiapp_backend.core.protocols import (
    IdentityProviderProtocol,
    RemoteStoreProtocol,
)
from notiapp_backend.core.repository import (
    DEFAULT_COLLECTION,
    MISSING_POLICY_IGNORE,
    ScheduleRepository,
)
from notiapp_backend.core.session import SessionContext
from notiapp_backend.stores import (
    FirebaseAuthProvider,
    FirestoreStore,
    InMemoryAuthProvider,
    InMemoryStore,
)

logger = get_logger(__name__)

BACKEND_FIREBASE = "firebase"
BACKEND_MEMORY = "memory"

_runtime: Optional["AppRuntime"] = None
_exit_handlers_registered = False


class AppRuntime:
    """The wired object graph: provider -> session -> engine <- repository <- store"""

    def __init__(
        self,
        provider: IdentityProviderProtocol,
        store: RemoteStoreProtocol,
        collection: str = DEFAULT_COLLECTION,
        missing_document_policy: str = MISSING_POLICY_IGNORE,
        backend: str = BACKEND_MEMORY,
    ):
        self.backend = backend
        self.provider = provider
        self.store = store
        self.session = SessionContext(provider)
        self.repository = ScheduleRepository(
            store,
            collection=collection,
            missing_document_policy=missing_document_policy,
        )
        self.engine = ScheduleEngine(self.repository, self.session)
        self.is_running = False

    @property
    def fatal_error(self) -> Optional[str]:
        return self.session.fatal_error

    def start(self) -> None:
        """Bind the engine and subscribe the session

        A failed subscription leaves the session loading with fatal_error set; the
        runtime still starts so the presentation layer can read and show it.
        """
        if self.is_running:
            return
        self.engine.bind()
        try:
            self.session.start()
        except AuthError as e:
            logger.error(f"Session unavailable: {e.message}")
        self.is_running = True

    async def stop(self) -> None:
        if not self.is_running:
            return
        self.session.stop()
        self.engine.unbind()
        await self.engine.drain()
        self.is_running = False

    def get_stats(self) -> Dict[str, Any]:
        return {
            "isRunning": self.is_running,
            "backend": self.backend,
            "collection": self.repository.collection,
            "missingDocumentPolicy": self.repository.missing_document_policy,
            "authenticated": self.session.is_authenticated,
            "fatalError": self.fatal_error,
            "loadState": self.engine.load_state.value,
            "scheduleCount": len(self.engine.raw_schedules),
        }


def build_runtime(config: ConfigLoader) -> AppRuntime:
    """Create the collaborators named by `remote.backend`"""
    backend = str(config.get("remote.backend", BACKEND_FIREBASE)).lower()
    timeout = float(config.get("remote.timeout", 15.0))
    collection = config.get("schedules.collection", DEFAULT_COLLECTION)
    policy = config.get("schedules.missing_document_policy", MISSING_POLICY_IGNORE)

    if backend == BACKEND_FIREBASE:
        provider = FirebaseAuthProvider(
            api_key=config.get("firebase.api_key", ""), timeout=timeout
        )
        project_id = config.get("firebase.project_id", "")
        if not project_id:
            logger.warning("firebase.project_id is empty, remote calls will fail")
        store = FirestoreStore(
            project_id=project_id,
            token_provider=provider.get_id_token,
            timeout=timeout,
        )
        return AppRuntime(provider, store, collection, policy, backend)

    if backend == BACKEND_MEMORY:
        return AppRuntime(
            InMemoryAuthProvider(), InMemoryStore(), collection, policy, backend
        )

    raise ValueError(f"Unknown remote.backend: {backend!r}")


def _cleanup_on_exit():
    """Drop the identity provider subscription on process exit"""
    if _runtime is not None and _runtime.is_running:
        _runtime.session.stop()


def _register_exit_handlers():
    global _exit_handlers_registered

    if _exit_handlers_registered:
        return
    atexit.register(_cleanup_on_exit)
    _exit_handlers_registered = True


async def start_runtime(config_file: Optional[str] = None) -> AppRuntime:
    """Start the session and engine; returns the running instance if already started."""
    global _runtime

    if _runtime is not None and _runtime.is_running:
        logger.info("Runtime already running")
        return _runtime

    config_loader = get_config(config_file)
    setup_logging()
    logger.info(f"✓ Configuration file: {config_loader.config_file}")

    runtime = build_runtime(config_loader)
    _register_exit_handlers()

    try:
        runtime.start()
    except Exception as e:
        logger.error(f"Runtime failed to start: {e}")
        raise

    _runtime = runtime
    if runtime.fatal_error:
        logger.warning(f"Runtime started without a session: {runtime.fatal_error}")
    else:
        logger.info(f"✓ Runtime started ({runtime.backend} backend)")
    return runtime


async def stop_runtime(*, quiet: bool = False) -> Optional[AppRuntime]:
    """Stop the runtime if it is running.

    Args:
        quiet: only log at debug level.
    """
    global _runtime

    runtime = _runtime
    if runtime is None or not runtime.is_running:
        if not quiet:
            logger.info("Runtime is not running")
        return runtime

    await runtime.stop()
    _runtime = None
    if quiet:
        logger.debug("Runtime stopped")
    else:
        logger.info("Runtime stopped")
    return runtime


def get_runtime() -> AppRuntime:
    """Running runtime instance; raises RuntimeError before start_runtime()"""
    if _runtime is None:
        raise RuntimeError("Runtime is not started")
    return _runtime


async def get_runtime_stats() -> Dict[str, Any]:
    if _runtime is None:
        return {"isRunning": False}
    return _runtime.get_stats()
