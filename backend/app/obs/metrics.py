"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNTER = Counter(
	"campus_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"campus_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SOCKET_CLIENTS = Gauge(
	"campus_socketio_clients",
	"Active Socket.IO clients per namespace",
	["namespace"],
)

SOCKET_EVENTS = Counter(
	"campus_socketio_events_total",
	"Socket.IO events emitted per namespace",
	["namespace", "event"],
)

FRIEND_REQUESTS_SENT = Counter(
	"campus_friend_requests_sent_total",
	"Friend requests sent, by result",
	["result"],
)

FRIEND_REQUEST_REJECTS = Counter(
	"campus_friend_request_rejects_total",
	"Friend request sends rejected, by reason",
	["reason"],
)

FRIEND_REQUEST_TRANSITIONS = Counter(
	"campus_friend_request_transitions_total",
	"Friend request status transitions",
	["status"],
)

FRIEND_REQUEST_NOTIFY_FAILURES = Counter(
	"campus_friend_request_notify_failures_total",
	"Audit or socket notifications dropped after a committed transition",
	["event"],
)

DISCOVER_LATENCY = Histogram(
	"campus_discover_duration_seconds",
	"Time spent building a discover page",
	buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

PROFILES_SCORED = Counter(
	"campus_profiles_scored_total",
	"Candidate profiles scored for discover",
)

CHAT_MESSAGES = Counter(
	"campus_chat_messages_total",
	"Chat messages sent",
	["kind"],
)

CHAT_CONVERSATIONS = Counter(
	"campus_chat_conversations_created_total",
	"Conversations created",
	["kind"],
)

CHAT_READ = Counter(
	"campus_chat_messages_read_total",
	"Messages marked as read",
)

CHAT_EVENTS = Counter(
	"campus_chat_events_total",
	"Realtime message events consumed by the dispatcher",
	["result"],
)

STORE_UP = Gauge(
	"campus_store_up",
	"Backing store reachability (1 = up)",
	["store"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def socket_connected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).inc()


def socket_disconnected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).dec()


def socket_event(namespace: str, event: str) -> None:
	SOCKET_EVENTS.labels(namespace=namespace, event=event).inc()


def inc_friend_request_sent(result: str) -> None:
	FRIEND_REQUESTS_SENT.labels(result=result).inc()


def inc_friend_request_reject(reason: str) -> None:
	FRIEND_REQUEST_REJECTS.labels(reason=reason).inc()


def inc_friend_request_transition(status: str) -> None:
	FRIEND_REQUEST_TRANSITIONS.labels(status=status).inc()


def inc_friend_request_notify_failure(event: str) -> None:
	FRIEND_REQUEST_NOTIFY_FAILURES.labels(event=event).inc()


def observe_discover(elapsed_seconds: float, scored: int) -> None:
	DISCOVER_LATENCY.observe(elapsed_seconds)
	PROFILES_SCORED.inc(scored)


def inc_chat_send(kind: str) -> None:
	CHAT_MESSAGES.labels(kind=kind).inc()


def inc_conversation_created(kind: str) -> None:
	CHAT_CONVERSATIONS.labels(kind=kind).inc()


def inc_chat_read(count: int) -> None:
	if count > 0:
		CHAT_READ.inc(count)


def inc_chat_event(result: str) -> None:
	CHAT_EVENTS.labels(result=result).inc()


def mark_store(store: str, ok: bool) -> None:
	STORE_UP.labels(store=store).set(1 if ok else 0)
