"""Change notifications for phases, incidents, agents and directory records."""
from core.events.signal import Signal


class DomainEvents:
    def __init__(self) -> None:
        self.phases_changed: Signal[str] = Signal()      # related_id of the workflow group
        self.incidents_changed: Signal[str] = Signal()   # phase_id
        self.agents_changed: Signal[str] = Signal()      # agent_id
        self.directory_changed: Signal[str] = Signal()   # record id


# SINGLE global instance
domain_events = DomainEvents()
