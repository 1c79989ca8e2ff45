"""
Delivery assignment workflow with thread-per-assignment architecture.

An admin hands paid orders to a third-party carrier (Uber or PickMe). Each
admin browser session owns one DeliveryWorkflow; the DeliveryService keeps
the workflows and runs every confirmed assignment in its own thread.

STATE PER ORDER (derived, never stored):
    Assigning - an assignment request for this order is in flight
    Assigned  - deliveryMethod is a carrier, or the order was assigned
                earlier in this session (the "clicked" set)
    NotReady  - status is not "confirmed" (e.g. transfer_pending)
    Ready     - anything else; carrier actions enabled

    Precedence is the order above: an in-flight order is Assigning even if a
    re-fetch already shows the carrier.

THREAD SAFETY:
    - Each assignment thread creates its OWN MarketplaceAPIClient
    - The token is captured in the request thread (StaticTokenProvider);
      assignment threads never touch the Flask session
    - DeliveryWorkflow guards its dictionaries with a lock that is never held
      across a network call, so assignments of different orders never wait
      on each other
    - Orders are frozen dataclasses; merging replaces, never mutates

SEQUENCING:
    Every confirm takes a new monotonic request id for its order. A response
    carrying an older id than the latest one for that order is discarded.

Flow:
    1. Request thread: workflow.select_carrier(order_id, "Uber") opens a prompt
    2. Request thread: delivery_service.submit_assignment(workflow, tokens)
       -> workflow.confirm() marks the order Assigning, returns a ticket
    3. Assignment thread: PUT /api/orders/{id}/status
       {"status": "shipped", "deliveryMethod": carrier}
    4. Assignment thread: workflow.complete(ticket, order) or
       workflow.fail(ticket, reason)
    5. Request thread: the page polls /delivery/status and flashes
       workflow.drain_notifications()

Usage:
    # At app startup
    delivery_service = DeliveryService(client_factory)

    # In routes (request thread)
    workflow = delivery_service.get_or_create_workflow(session.get("delivery_workflow"))
    delivery_service.refresh(workflow, api_client)
    workflow.select_carrier(order_id, "PickMe")
    delivery_service.submit_assignment(workflow, SessionTokenProvider("admin").capture())

    # At app shutdown
    delivery_service.shutdown()
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from core.api_client import MarketplaceAPIClient
from core.exceptions import InvalidTransitionError
from core.session import TokenProvider
from models.order import CARRIERS, Order
from modules.order_filter import eligible_for_delivery
from logging_config import get_logger, get_assignment_logger, set_thread_name, short_id


# Module logger
logger = get_logger(__name__)

ORDERS_PATH = "/api/orders/admin"
SHIPPED = "shipped"
CONFIRMED = "confirmed"
DEFAULT_WORKFLOW_TTL_SECONDS = 3600.0

ClientFactory = Callable[[TokenProvider], MarketplaceAPIClient]


class AssignmentState(Enum):
    """Tagged state of one order on the delivery page."""
    READY = "Ready"
    ASSIGNING = "Assigning"
    ASSIGNED = "Assigned"
    NOT_READY = "NotReady"


def derive_assignment_state(order: Order, assigning: bool = False, clicked: bool = False) -> AssignmentState:
    """
    Single source of truth for rendering and action gating.

    Args:
        order: Latest known copy of the order
        assigning: An assignment request for this order is in flight
        clicked: The order was assigned earlier in this session
    """
    if assigning:
        return AssignmentState.ASSIGNING
    if order.delivery_method in CARRIERS or clicked:
        return AssignmentState.ASSIGNED
    if order.status != CONFIRMED:
        return AssignmentState.NOT_READY
    return AssignmentState.READY


def build_assignment_body(carrier: str) -> Dict[str, str]:
    """Body of PUT /api/orders/{id}/status for a carrier hand-off."""
    return {"status": SHIPPED, "deliveryMethod": carrier}


@dataclass(frozen=True)
class AssignmentPrompt:
    """Open confirmation dialog: chosen carrier plus order snapshot."""
    order: Order
    carrier: str


@dataclass(frozen=True)
class AssignmentTicket:
    """Everything an assignment thread needs; immutable hand-off."""
    order_id: str
    order_number: str
    carrier: str
    request_id: int


@dataclass(frozen=True)
class Notification:
    """Transient message for the admin; category matches Flask flash categories."""
    category: str
    message: str


@dataclass(frozen=True)
class AssignmentRow:
    """One table row on the delivery page."""
    order: Order
    state: AssignmentState

    @property
    def actions_enabled(self) -> bool:
        return self.state is AssignmentState.READY

    @property
    def busy(self) -> bool:
        return self.state is AssignmentState.ASSIGNING


class DeliveryWorkflow:
    """
    Per-admin-session assignment state machine.

    Holds the cached eligible orders, the in-flight request ids, the clicked
    set, the open prompt and queued notifications. All public methods are
    safe to call from request threads and assignment threads.
    """

    def __init__(self, workflow_id: Optional[str] = None):
        self.workflow_id = workflow_id or str(uuid.uuid4())

        self._orders: Dict[str, Order] = {}
        self._order_ids: List[str] = []
        self._clicked: Set[str] = set()
        self._in_flight: Dict[str, int] = {}
        self._latest_request: Dict[str, int] = {}
        self._prompt: Optional[AssignmentPrompt] = None
        self._notifications: List[Notification] = []
        self._lock = threading.Lock()

    # =========================================================================
    # COLLECTION
    # =========================================================================

    def load(self, orders: List[Order]) -> int:
        """
        Replace the cached collection with the eligible subset of ``orders``.

        The clicked set and in-flight flags survive, so a stale re-fetch
        cannot re-enable assignment for an order handled this session.

        Returns:
            Number of eligible orders now cached
        """
        eligible = eligible_for_delivery(orders)
        with self._lock:
            self._orders = {order.id: order for order in eligible}
            self._order_ids = [order.id for order in eligible]
            if self._prompt and self._prompt.order.id not in self._orders:
                self._prompt = None
        logger.debug(f"Workflow {short_id(self.workflow_id)} loaded {len(eligible)} eligible orders")
        return len(eligible)

    def rows(self) -> List[AssignmentRow]:
        with self._lock:
            return [
                AssignmentRow(order=self._orders[oid], state=self._state_locked(oid))
                for oid in self._order_ids
            ]

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def state_for(self, order_id: str) -> AssignmentState:
        """
        Raises:
            KeyError: If the order is not on the delivery page
        """
        with self._lock:
            if order_id not in self._orders:
                raise KeyError(order_id)
            return self._state_locked(order_id)

    @property
    def assigning_ids(self) -> List[str]:
        with self._lock:
            return list(self._in_flight)

    @property
    def prompt(self) -> Optional[AssignmentPrompt]:
        with self._lock:
            return self._prompt

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def select_carrier(self, order_id: str, carrier: str) -> AssignmentPrompt:
        """
        Open the confirmation prompt for a Ready order.

        Raises:
            KeyError: If the order is not on the delivery page
            InvalidTransitionError: If the carrier is unknown or the order is
                not Ready (nothing changes in that case)
        """
        with self._lock:
            if order_id not in self._orders:
                raise KeyError(order_id)
            state = self._state_locked(order_id)
            if carrier not in CARRIERS or state is not AssignmentState.READY:
                raise InvalidTransitionError("order", state.value, f"assign {carrier} to")
            self._prompt = AssignmentPrompt(order=self._orders[order_id], carrier=carrier)
            return self._prompt

    def cancel_prompt(self) -> None:
        """Close the prompt without side effects."""
        with self._lock:
            self._prompt = None

    def confirm(self) -> Optional[AssignmentTicket]:
        """
        Confirm the open prompt and mark its order Assigning.

        Returns:
            Ticket for the assignment request, or None when there is nothing
            to send (no prompt, or the order is no longer Ready). No network
            request may be issued for a None result.
        """
        with self._lock:
            prompt = self._prompt
            if prompt is None:
                return None

            order_id = prompt.order.id
            if order_id not in self._orders or self._state_locked(order_id) is not AssignmentState.READY:
                logger.info(f"Ignoring confirm for order {short_id(order_id)}: not ready")
                self._prompt = None
                return None

            request_id = self._latest_request.get(order_id, 0) + 1
            self._latest_request[order_id] = request_id
            self._in_flight[order_id] = request_id

            return AssignmentTicket(
                order_id=order_id,
                order_number=prompt.order.order_number,
                carrier=prompt.carrier,
                request_id=request_id,
            )

    def complete(self, ticket: AssignmentTicket, updated: Order) -> bool:
        """
        Apply a successful assignment response.

        Returns:
            False if the response was stale and discarded
        """
        with self._lock:
            if not self._is_current_locked(ticket):
                logger.warning(
                    f"Discarding stale response for order {short_id(ticket.order_id)} "
                    f"(request {ticket.request_id}, latest {self._latest_request.get(ticket.order_id)})"
                )
                return False

            self._in_flight.pop(ticket.order_id, None)
            if ticket.order_id in self._orders:
                self._orders[ticket.order_id] = updated
            self._clicked.add(ticket.order_id)
            self._close_prompt_locked(ticket.order_id)

            number = updated.order_number or ticket.order_number
            self._notifications.append(Notification(
                "success", f"Order {number} successfully assigned to {ticket.carrier}"
            ))
            return True

    def fail(self, ticket: AssignmentTicket, reason: str) -> bool:
        """
        Revert a failed assignment to Ready and queue the error.

        Returns:
            False if the failure was stale and discarded
        """
        with self._lock:
            if not self._is_current_locked(ticket):
                logger.warning(f"Discarding stale failure for order {short_id(ticket.order_id)}")
                return False

            self._in_flight.pop(ticket.order_id, None)
            self._close_prompt_locked(ticket.order_id)
            self._notifications.append(Notification("error", f"Failed to assign delivery: {reason}"))
            return True

    def notify(self, category: str, message: str) -> None:
        with self._lock:
            self._notifications.append(Notification(category, message))

    def drain_notifications(self) -> List[Notification]:
        """Return and clear queued notifications."""
        with self._lock:
            pending, self._notifications = self._notifications, []
            return pending

    # =========================================================================
    # INTERNALS (caller holds self._lock)
    # =========================================================================

    def _state_locked(self, order_id: str) -> AssignmentState:
        return derive_assignment_state(
            self._orders[order_id],
            assigning=order_id in self._in_flight,
            clicked=order_id in self._clicked,
        )

    def _is_current_locked(self, ticket: AssignmentTicket) -> bool:
        return (
            self._latest_request.get(ticket.order_id) == ticket.request_id
            and self._in_flight.get(ticket.order_id) == ticket.request_id
        )

    def _close_prompt_locked(self, order_id: str) -> None:
        if self._prompt and self._prompt.order.id == order_id:
            self._prompt = None


class DeliveryService:
    """
    Registry of delivery workflows plus the assignment threads.

    Creates one thread per confirmed assignment. Each thread:
    1. Creates its own MarketplaceAPIClient from the captured token
    2. Sends the carrier hand-off
    3. Reports the outcome back into the owning workflow

    Attributes:
        client_factory: Builds an API client from a token provider
        idle_ttl_seconds: Unused workflows older than this are evicted
        clock: Monotonic time source (tests pass a fake)
    """

    def __init__(self, client_factory: ClientFactory, idle_ttl_seconds: float = DEFAULT_WORKFLOW_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self._client_factory = client_factory

        # Workflows idle longer than idle_ttl_seconds are evicted on lookup
        self._workflows: Dict[str, DeliveryWorkflow] = {}
        self._last_access: Dict[str, float] = {}
        self._idle_ttl = idle_ttl_seconds
        self._clock = clock
        self._workflows_lock = threading.Lock()

        # Track active assignment threads for cleanup
        self._active_threads: Dict[str, threading.Thread] = {}
        self._threads_lock = threading.Lock()

        logger.info("DeliveryService initialized")

    # =========================================================================
    # WORKFLOW REGISTRY
    # =========================================================================

    def get_or_create_workflow(self, workflow_id: Optional[str]) -> DeliveryWorkflow:
        """Look up a session's workflow, creating a fresh one if unknown."""
        with self._workflows_lock:
            now = self._clock()
            self._evict_idle_locked(now)
            workflow = self._workflows.get(workflow_id) if workflow_id else None
            if workflow is None:
                workflow = DeliveryWorkflow(workflow_id)
                self._workflows[workflow.workflow_id] = workflow
                logger.info(f"Created delivery workflow {short_id(workflow.workflow_id)}")
            self._last_access[workflow.workflow_id] = now
            return workflow

    def get_workflow(self, workflow_id: Optional[str]) -> Optional[DeliveryWorkflow]:
        if not workflow_id:
            return None
        with self._workflows_lock:
            now = self._clock()
            self._evict_idle_locked(now)
            workflow = self._workflows.get(workflow_id)
            if workflow is not None:
                self._last_access[workflow_id] = now
            return workflow

    def discard_workflow(self, workflow_id: Optional[str]) -> None:
        """Forget a workflow (admin logged out)."""
        if not workflow_id:
            return
        with self._workflows_lock:
            self._workflows.pop(workflow_id, None)
            self._last_access.pop(workflow_id, None)

    @property
    def workflow_count(self) -> int:
        with self._workflows_lock:
            return len(self._workflows)

    def _evict_idle_locked(self, now: float) -> None:
        """Drop idle workflows; one with an assignment in flight is kept."""
        expired = [
            wid for wid, seen in self._last_access.items()
            if now - seen > self._idle_ttl and not self._workflows[wid].assigning_ids
        ]
        for wid in expired:
            del self._workflows[wid]
            del self._last_access[wid]
        if expired:
            logger.info(f"Evicted {len(expired)} idle delivery workflows")

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def refresh(self, workflow: DeliveryWorkflow, api_client: MarketplaceAPIClient) -> int:
        """
        Re-fetch all admin orders and reload the workflow.

        Raises:
            ApiTransportError / ApiHTTPError / ResponseSchemaError: Left to the
                calling view, the cached collection is untouched
        """
        orders = Order.list_from(api_client.get(ORDERS_PATH))
        return workflow.load(orders)

    def submit_assignment(
        self,
        workflow: DeliveryWorkflow,
        token_provider: TokenProvider
    ) -> Optional[AssignmentTicket]:
        """
        Confirm the workflow's prompt and start the assignment thread.

        Args:
            workflow: The admin's workflow, with an open prompt
            token_provider: Provider usable outside a request context

        Returns:
            The ticket, or None when confirm had nothing to send

        Note:
            This returns immediately. Poll workflow state to see completion.
        """
        ticket = workflow.confirm()
        if ticket is None:
            return None

        thread_key = f"{ticket.order_id}:{ticket.request_id}"
        logger.info(f"Assigning order {ticket.order_number} to {ticket.carrier} (request {ticket.request_id})")

        thread = threading.Thread(
            target=self._assignment_thread_main,
            args=(workflow, ticket, token_provider, thread_key),
            name=f"Assign-{short_id(ticket.order_id)}",
            daemon=True
        )

        with self._threads_lock:
            self._active_threads[thread_key] = thread

        thread.start()
        return ticket

    def run_assignment(
        self,
        workflow: DeliveryWorkflow,
        ticket: AssignmentTicket,
        api_client: MarketplaceAPIClient
    ) -> bool:
        """
        Send one carrier hand-off and report the outcome to the workflow.

        Every failure is converted into workflow.fail(); nothing propagates.

        Returns:
            True if the assignment succeeded and was applied
        """
        assign_logger = get_assignment_logger(ticket.order_id)
        try:
            response = api_client.put(
                f"/api/orders/{ticket.order_id}/status",
                json=build_assignment_body(ticket.carrier),
            )
            if isinstance(response, dict) and isinstance(response.get("order"), dict):
                response = response["order"]
            updated = Order.from_dict(response)
        except Exception as e:
            assign_logger.error(f"Assignment to {ticket.carrier} failed: {e}")
            workflow.fail(ticket, getattr(e, "message", str(e)))
            return False

        assign_logger.info(f"Backend accepted {ticket.carrier}; status now {updated.status}")
        return workflow.complete(ticket, updated)

    def is_assignment_pending(self, order_id: str) -> bool:
        with self._threads_lock:
            return any(
                key.split(":", 1)[0] == order_id and thread.is_alive()
                for key, thread in self._active_threads.items()
            )

    def shutdown(self, timeout_per_thread: float = 5.0) -> None:
        """
        Wait for active assignment threads to complete.

        Args:
            timeout_per_thread: Max seconds to wait per thread
        """
        with self._threads_lock:
            active = list(self._active_threads.items())

        if not active:
            logger.info("No active assignment threads to wait for")
            return

        logger.info(f"Waiting for {len(active)} assignment threads to complete...")

        for key, thread in active:
            if thread.is_alive():
                thread.join(timeout=timeout_per_thread)
                if thread.is_alive():
                    logger.warning(f"Assignment thread {key} did not complete in time")

        logger.info("Delivery service shutdown complete")

    def _assignment_thread_main(
        self,
        workflow: DeliveryWorkflow,
        ticket: AssignmentTicket,
        token_provider: TokenProvider,
        thread_key: str
    ) -> None:
        set_thread_name(f"Assign-{short_id(ticket.order_id)}")
        assign_logger = get_assignment_logger(ticket.order_id)
        assign_logger.info(f"Assignment thread starting ({ticket.carrier})")

        api_client: Optional[MarketplaceAPIClient] = None
        try:
            api_client = self._client_factory(token_provider)
            self.run_assignment(workflow, ticket, api_client)
        except Exception as e:
            # Client construction failed; the workflow must not stay Assigning
            assign_logger.error(f"Assignment thread could not start: {e}")
            workflow.fail(ticket, str(e))
        finally:
            if api_client is not None:
                api_client.close()

            with self._threads_lock:
                self._active_threads.pop(thread_key, None)

            assign_logger.info("Assignment thread exiting")
