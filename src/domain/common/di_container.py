#src/domain/common/di_container.py

"""
Dependency injection container for the application.

Services are registered once in ``initialize_app`` and passed explicitly to
whatever needs them; nothing reaches for a module-level singleton.
"""
from typing import Any, Callable, Dict, List, Type, TypeVar


T = TypeVar('T')
TBase = TypeVar('TBase')


class DIContainer:
    """
    Dependency injection container with instance, factory and singleton registrations.

    Singletons are created lazily on first resolve and remembered in creation
    order so ``dispose`` can tear them down in reverse.
    """

    def __init__(self):
        self._instance_registrations: Dict[type, Any] = {}
        self._factory_registrations: Dict[type, Callable[[], Any]] = {}
        self._singleton_factories: Dict[type, Callable[[], Any]] = {}
        self._creation_order: List[type] = []
        self._resolving = set()  # Types currently being resolved, for cycle detection

    def register_instance(self, base_type: Type[TBase], instance: TBase) -> None:
        """Register an already constructed instance for base_type."""
        self._instance_registrations[base_type] = instance
        self._creation_order.append(base_type)

    def register_factory(self, base_type: Type[TBase], factory: Callable[[], TBase]) -> None:
        """Register a factory called on every resolve of base_type."""
        self._factory_registrations[base_type] = factory

    def register_singleton(self, base_type: Type[TBase], factory: Callable[[], TBase]) -> None:
        """Register a factory called once, on the first resolve of base_type."""
        self._singleton_factories[base_type] = factory

    def is_registered(self, base_type: type) -> bool:
        return (base_type in self._instance_registrations
                or base_type in self._factory_registrations
                or base_type in self._singleton_factories)

    def resolve(self, base_type: Type[T]) -> T:
        """
        Resolve a type to its registered instance or create a new instance.

        Raises:
            ValueError: If the type is not registered or there's a circular dependency
        """
        if base_type in self._resolving:
            raise ValueError(f"Circular dependency detected while resolving {base_type.__name__}")

        if base_type in self._instance_registrations:
            return self._instance_registrations[base_type]

        if base_type in self._singleton_factories:
            instance = self._create(base_type, self._singleton_factories[base_type])
            self.register_instance(base_type, instance)
            return instance

        if base_type in self._factory_registrations:
            return self._create(base_type, self._factory_registrations[base_type])

        raise ValueError(f"No registration found for {base_type.__name__}")

    def dispose(self, teardown: Callable[[Any], None]) -> None:
        """
        Call teardown on every held instance, most recently created first,
        then forget all instances.
        """
        for base_type in reversed(self._creation_order):
            instance = self._instance_registrations.get(base_type)
            if instance is not None:
                teardown(instance)
        self._instance_registrations.clear()
        self._creation_order.clear()

    def _create(self, base_type: type, factory: Callable[[], Any]) -> Any:
        self._resolving.add(base_type)
        try:
            return factory()
        finally:
            self._resolving.remove(base_type)
