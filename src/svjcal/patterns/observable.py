"""
Notify-on-change relationships between market objects.

Quotes, term structures, models and engines are shared between several
consumers. Instead of polling, consumers register as observers and are told
when something they depend on has changed; they then drop whatever they had
cached and recompute lazily on the next request.

Observers are held through weak references, so registering never extends the
lifetime of the observer.
"""

import logging
import weakref
from typing import Iterable, List

logger = logging.getLogger(__name__)


class Observable:
    """Mixin for objects whose changes must be broadcast."""

    def _observer_set(self) -> "weakref.WeakSet":
        try:
            return self.__dict__["_observers"]
        except KeyError:
            observers = weakref.WeakSet()
            self.__dict__["_observers"] = observers
            return observers

    def register_observer(self, observer: "Observer") -> None:
        self._observer_set().add(observer)

    def unregister_observer(self, observer: "Observer") -> None:
        self._observer_set().discard(observer)

    def observers(self) -> List["Observer"]:
        return list(self._observer_set())

    def notify_observers(self) -> None:
        """Call ``update()`` on every live observer."""
        for observer in list(self._observer_set()):
            observer.update()


class Observer:
    """Mixin for objects that react to changes in their dependencies."""

    def register_with(self, observable) -> None:
        if observable is not None and isinstance(observable, Observable):
            observable.register_observer(self)

    def register_with_all(self, observables: Iterable) -> None:
        for observable in observables:
            self.register_with(observable)

    def unregister_with(self, observable) -> None:
        if observable is not None and isinstance(observable, Observable):
            observable.unregister_observer(self)

    def update(self) -> None:
        """Hook called by observed objects; override in subclasses."""
        pass
