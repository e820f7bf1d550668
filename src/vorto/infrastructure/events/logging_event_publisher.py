"""Event publisher writing role changes to a dedicated logger."""

import logging

from vorto.application.ports import NamespaceRolesChanged

logger = logging.getLogger("vorto.events")


class LoggingEventPublisher:
    """Publishes role change events as log records."""

    def publish(self, event: NamespaceRolesChanged) -> None:
        logger.info(
            "%s: actor=%s target=%s namespace=%s roles=%s at=%s",
            event.kind,
            event.actor,
            event.target,
            event.namespace,
            ",".join(event.roles),
            event.occurred_at.isoformat(),
        )
