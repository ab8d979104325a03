"""Small service container shared by the CLI commands."""

import inspect
import threading
from typing import Any, Callable, Dict, Optional, Type, TypeVar

T = TypeVar("T")


class DependencyContainer:
    """
    Maps an interface to a factory and caches the built instance.

    Usage:
        container = DependencyContainer()
        container.register(ProcessRunner, SubprocessRunner)
        container.register(DriverSettings, factory=load_settings)

        runner = container.resolve(ProcessRunner)
    """

    def __init__(self):
        self._factories: Dict[Type, Callable[..., Any]] = {}
        self._instances: Dict[Type, Any] = {}
        self._lock = threading.RLock()

    def register(
        self,
        interface: Type[T],
        factory: Callable[..., T] = None,
        instance: T = None,
    ) -> "DependencyContainer":
        """Register a factory (a class or a function) or a ready instance."""
        with self._lock:
            if instance is not None:
                self._instances[interface] = instance
                self._factories[interface] = lambda: instance
            elif factory is not None:
                self._instances.pop(interface, None)
                self._factories[interface] = factory
            else:
                raise ValueError("Must provide a factory or an instance")
        return self

    def resolve(self, interface: Type[T]) -> T:
        with self._lock:
            if interface in self._instances:
                return self._instances[interface]

            factory = self._factories.get(interface)
            if factory is None:
                if inspect.isclass(interface) and not inspect.isabstract(interface):
                    return self._create_instance(interface)
                raise KeyError(f"No registration for {interface}")

            instance = self._instances[interface] = self._create_instance(factory)
            return instance

    def _create_instance(self, factory: Callable) -> Any:
        """Call ``factory``, injecting registered types into annotated parameters."""
        kwargs = {}
        for name, param in inspect.signature(factory).parameters.items():
            if param.annotation is inspect.Parameter.empty:
                continue
            # Parameters with defaults are only injected when registered.
            if param.default is not inspect.Parameter.empty and not self.has(param.annotation):
                continue
            kwargs[name] = self.resolve(param.annotation)
        return factory(**kwargs)

    def has(self, interface: Type) -> bool:
        return interface in self._factories


_container: Optional[DependencyContainer] = None


def get_container() -> DependencyContainer:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = create_default_container()
    return _container


def set_container(container: Optional[DependencyContainer]) -> None:
    """Set the global container (None rebuilds the defaults on next use)."""
    global _container
    _container = container


def create_default_container() -> DependencyContainer:
    from .backends.subprocess_runner import SubprocessRunner
    from .config import load_settings
    from .interfaces.process import ProcessRunner
    from .models import DriverSettings

    return (
        DependencyContainer()
        .register(ProcessRunner, SubprocessRunner)
        .register(DriverSettings, factory=load_settings)
    )
