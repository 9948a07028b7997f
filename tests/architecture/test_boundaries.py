from pytest_archon import archrule


def test_primitives_isolation() -> None:
    """
    Primitives are the foundation: they must not import anything else
    from the package.
    """
    (
        archrule("primitives_isolation")
        .match("settings_sync.primitives*")
        .should_not_import("settings_sync.settings*")
        .should_not_import("settings_sync.messaging*")
        .should_not_import("settings_sync.persistence*")
        .should_not_import("settings_sync.ports*")
        .check("settings_sync")
    )


def test_ports_are_transport_agnostic() -> None:
    """
    Ports describe what the engine needs, never how RabbitMQ or SQL provide it.
    """
    (
        archrule("ports_independence")
        .match("settings_sync.ports*")
        .should_not_import("settings_sync.messaging.rabbitmq*")
        .should_not_import("settings_sync.persistence*")
        .should_not_import("aio_pika*")
        .should_not_import("sqlalchemy*")
        .check("settings_sync")
    )


def test_engine_depends_on_ports_only() -> None:
    """
    The settings engine talks to the broker and the store through ports.
    Concrete adapters are wired in the container.
    """
    (
        archrule("settings_layering")
        .match("settings_sync.settings*")
        .should_not_import("settings_sync.messaging.rabbitmq*")
        .should_not_import("settings_sync.persistence*")
        .should_not_import("settings_sync.container")
        .check("settings_sync")
    )


def test_persistence_does_not_know_about_messaging() -> None:
    (
        archrule("persistence_isolation")
        .match("settings_sync.persistence*")
        .should_not_import("settings_sync.messaging.rabbitmq*")
        .should_not_import("aio_pika*")
        .check("settings_sync")
    )
