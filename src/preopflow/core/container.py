"""
Dependency injection container for the PreopFlow application.

This module provides a lightweight dependency injection container and the
wiring that assembles storage, event bus, circuit services and use cases.
"""

from typing import Any, Callable, Dict, Optional

from .config import Settings, get_settings
from .exceptions import ConfigurationError


class Container:
    """Lightweight dependency injection container."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._singletons: Dict[str, Any] = {}
        self.settings = settings or get_settings()

    def register_singleton(self, name: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[name] = instance

    def register_factory(self, name: str, factory: Callable[[], Any]) -> None:
        """Register a factory function; its result is cached on first use."""
        self._factories[name] = factory

    def register_service(self, name: str, service: Any) -> None:
        """Register a service instance."""
        self._services[name] = service

    def get(self, name: str) -> Any:
        """Get a service by name."""
        if name in self._singletons:
            return self._singletons[name]

        if name in self._services:
            return self._services[name]

        if name in self._factories:
            instance = self._factories[name]()
            self._singletons[name] = instance
            return instance

        raise ConfigurationError(f"Service '{name}' not found")

    def get_or_none(self, name: str) -> Optional[Any]:
        """Get a service by name, return None if not found."""
        try:
            return self.get(name)
        except ConfigurationError:
            return None

    def has(self, name: str) -> bool:
        """Check if a service is registered."""
        return name in self._services or name in self._factories or name in self._singletons

    def clear(self) -> None:
        """Clear all registered services."""
        self._services.clear()
        self._factories.clear()
        self._singletons.clear()


class ServiceNames:
    """Service names used throughout the application."""

    SETTINGS = "settings"
    CLOCK = "clock"
    UNIT_OF_WORK_FACTORY = "unit_of_work_factory"
    MEMORY_STORE = "memory_store"
    MONGO_CLIENT = "mongo_client"
    EVENT_BUS = "event_bus"
    CIRCUIT_SERVICES = "circuit_services"

    REGISTER_PATIENT = "register_patient"
    LIST_PATIENTS = "list_patients"
    LIST_PATIENT_STEPS = "list_patient_steps"
    ADD_STEP = "add_step"
    MARK_PENDING_SCHEDULING = "mark_pending_scheduling"
    REENTER_CIRCUIT = "reenter_circuit"
    REMOVE_PATIENT = "remove_patient"
    CALL_NEXT = "call_next"
    START_SERVICE = "start_service"
    FINISH_SERVICE = "finish_service"
    CANCEL_CALL = "cancel_call"
    EXPIRE_STALE_CALLS = "expire_stale_calls"
    CREATE_STATION = "create_station"
    SET_STATION_SPECIALTY = "set_station_specialty"
    SET_STATION_ACTIVE = "set_station_active"
    SEED_DEFAULT_STATIONS = "seed_default_stations"
    LIST_STATIONS = "list_stations"
    LIST_STEPS = "list_steps"
    QUEUE_STATS = "queue_stats"
    ACTIVE_ANNOUNCEMENTS = "active_announcements"
    DAY_REPORT = "day_report"


def _storage(container: Container) -> Callable[[], Any]:
    """Register the storage backend and return the unit of work factory."""
    settings = container.settings
    if settings.database.backend == "mongo":
        import certifi
        from motor.motor_asyncio import AsyncIOMotorClient

        from ..adapters.db.mongo.unit_of_work import MongoUnitOfWork

        uri = settings.database.uri
        client_kwargs = {"tz_aware": True}
        if uri.startswith("mongodb+srv://") or "tls=true" in uri.lower():
            client_kwargs["tlsCAFile"] = certifi.where()
        client = AsyncIOMotorClient(uri, **client_kwargs)
        container.register_singleton(ServiceNames.MONGO_CLIENT, client)
        return lambda: MongoUnitOfWork(client)

    from ..adapters.db.memory.store import InMemoryStore
    from ..adapters.db.memory.unit_of_work import InMemoryUnitOfWork

    store = InMemoryStore()
    container.register_singleton(ServiceNames.MEMORY_STORE, store)
    return lambda: InMemoryUnitOfWork(store)


def build_container(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], Any]] = None,
    uow_factory: Optional[Callable[[], Any]] = None,
) -> Container:
    """Assemble every dependency of the HTTP app and the sweeper."""
    from ..adapters.events.in_memory_event_bus import InMemoryEventBus, log_event
    from ..application.services.circuit import CircuitServices
    from ..application.services.policy import CircuitPolicy
    from ..application.use_cases.add_step import AddStepUseCase
    from ..application.use_cases.call_next_patient import CallNextPatientUseCase
    from ..application.use_cases.expire_calls import ExpireStaleCallsUseCase
    from ..application.use_cases.manage_patient import (
        MarkPendingSchedulingUseCase,
        ReenterCircuitUseCase,
        RemovePatientUseCase,
    )
    from ..application.use_cases.manage_station import (
        CreateStationUseCase,
        SeedDefaultStationsUseCase,
        SetStationActiveUseCase,
        SetStationSpecialtyUseCase,
    )
    from ..application.use_cases.queries import (
        GenerateDayReportUseCase,
        GetQueueStatsUseCase,
        ListActiveAnnouncementsUseCase,
        ListPatientStepsUseCase,
        ListPatientsUseCase,
        ListStationsUseCase,
        ListStepsUseCase,
    )
    from ..application.use_cases.register_patient import RegisterPatientUseCase
    from ..application.use_cases.station_service import (
        CancelCallUseCase,
        FinishServiceUseCase,
        StartServiceUseCase,
    )
    from .utils.datetime_utils import get_current_timestamp

    container = Container(settings)
    container.register_singleton(ServiceNames.SETTINGS, container.settings)

    clock = clock or get_current_timestamp
    container.register_singleton(ServiceNames.CLOCK, clock)

    factory = uow_factory or _storage(container)
    container.register_singleton(ServiceNames.UNIT_OF_WORK_FACTORY, factory)

    bus = InMemoryEventBus()
    bus.subscribe(log_event)
    container.register_singleton(ServiceNames.EVENT_BUS, bus)

    services = CircuitServices(CircuitPolicy.from_settings(container.settings.circuit))
    container.register_singleton(ServiceNames.CIRCUIT_SERVICES, services)

    use_cases = {
        ServiceNames.REGISTER_PATIENT: RegisterPatientUseCase,
        ServiceNames.LIST_PATIENTS: ListPatientsUseCase,
        ServiceNames.LIST_PATIENT_STEPS: ListPatientStepsUseCase,
        ServiceNames.ADD_STEP: AddStepUseCase,
        ServiceNames.MARK_PENDING_SCHEDULING: MarkPendingSchedulingUseCase,
        ServiceNames.REENTER_CIRCUIT: ReenterCircuitUseCase,
        ServiceNames.REMOVE_PATIENT: RemovePatientUseCase,
        ServiceNames.CALL_NEXT: CallNextPatientUseCase,
        ServiceNames.START_SERVICE: StartServiceUseCase,
        ServiceNames.FINISH_SERVICE: FinishServiceUseCase,
        ServiceNames.CANCEL_CALL: CancelCallUseCase,
        ServiceNames.EXPIRE_STALE_CALLS: ExpireStaleCallsUseCase,
        ServiceNames.CREATE_STATION: CreateStationUseCase,
        ServiceNames.SET_STATION_SPECIALTY: SetStationSpecialtyUseCase,
        ServiceNames.SET_STATION_ACTIVE: SetStationActiveUseCase,
        ServiceNames.SEED_DEFAULT_STATIONS: SeedDefaultStationsUseCase,
        ServiceNames.LIST_STATIONS: ListStationsUseCase,
        ServiceNames.LIST_STEPS: ListStepsUseCase,
        ServiceNames.QUEUE_STATS: GetQueueStatsUseCase,
        ServiceNames.ACTIVE_ANNOUNCEMENTS: ListActiveAnnouncementsUseCase,
        ServiceNames.DAY_REPORT: GenerateDayReportUseCase,
    }
    for name, use_case_cls in use_cases.items():
        container.register_factory(
            name,
            lambda cls=use_case_cls: cls(factory, bus, services, clock),
        )
    return container
