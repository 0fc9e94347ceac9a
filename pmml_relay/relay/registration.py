"""ModelRegistration -- the relay's cached model identifier.

One instance per relay, scoped to a configuration epoch::

    UNREGISTERED --ensure()--> REGISTERING --ok--> REGISTERED
         ^                          |                  |
         +--------- failure --------+                  |
         +------------------- reset() -----------------+

``ensure()`` holds a lock for the duration of the registration call, so
concurrent first callers register exactly once and the rest reuse the
identifier. ``reset()`` bumps the epoch; a registration made for an older
epoch, whether it was still in flight or its caller read the configuration
before the reset, does not install its identifier.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class RegistrationState(str, Enum):
    UNREGISTERED = "UNREGISTERED"
    REGISTERING = "REGISTERING"
    REGISTERED = "REGISTERED"


@dataclass(frozen=True)
class RegisteredModel:
    """Identifier of a model registered under a given service URL."""

    model_id: str
    service_url: str
    epoch: int
    cached: bool = True


def new_model_id() -> str:
    return str(uuid.uuid4())


class ModelRegistration:
    """Configuration-scoped, thread-safe holder of the model identifier."""

    def __init__(self, id_factory: Callable[[], str] = new_model_id):
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = RegistrationState.UNREGISTERED
        self._epoch = 0
        self._current: RegisteredModel | None = None

    @property
    def state(self) -> RegistrationState:
        return self._state

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def model_id(self) -> str | None:
        current = self._current
        return current.model_id if current else None

    @property
    def current(self) -> RegisteredModel | None:
        return self._current

    def ensure(
        self,
        service_url: str,
        register: Callable[[str, str], None],
        epoch: int | None = None,
    ) -> RegisteredModel:
        """Return the cached model, registering a new one if needed.

        Parameters
        ----------
        service_url : str
            Base URL the model is registered with.
        register : callable
            ``register(service_url, model_id)``; raises on failure.
        epoch : int | None
            Epoch the caller read its configuration under. Defaults to the
            current epoch.

        Returns
        -------
        RegisteredModel
            The model for the current epoch. If ``epoch`` is already stale,
            or a reset happened while the registration call was in flight,
            the returned model carries the old epoch and ``cached=False``.
        """
        current = self._current
        if current is not None:
            return current

        with self._lock:
            current = self._current
            if current is not None:
                return current

            with self._state_lock:
                if epoch is None:
                    epoch = self._epoch
                if epoch == self._epoch:
                    self._state = RegistrationState.REGISTERING

            model_id = self._id_factory()
            try:
                register(service_url, model_id)
            except Exception:
                with self._state_lock:
                    if self._epoch == epoch:
                        self._state = RegistrationState.UNREGISTERED
                raise

            registered = RegisteredModel(model_id, service_url, epoch)
            with self._state_lock:
                if self._epoch != epoch:
                    logger.info(
                        "Configuration changed before registration completed; not caching model %s",
                        model_id,
                    )
                    return RegisteredModel(model_id, service_url, epoch, cached=False)
                self._current = registered
                self._state = RegistrationState.REGISTERED

            logger.info("Model %s registered (epoch %d)", model_id, epoch)
            return registered

    def reset(self) -> RegisteredModel | None:
        """Start a new epoch and forget the cached identifier.

        Returns
        -------
        RegisteredModel | None
            The model this reset superseded, if one was registered.
        """
        with self._state_lock:
            previous = self._current
            self._current = None
            self._epoch += 1
            self._state = RegistrationState.UNREGISTERED
        if previous is not None:
            logger.debug("Model %s invalidated", previous.model_id)
        return previous
