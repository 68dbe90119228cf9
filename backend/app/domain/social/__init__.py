"""Social domain exports."""

from . import audit, policy, service, sockets  # noqa: F401
from .models import FriendRequestStatus, RelationshipState  # noqa: F401
from .relationship import RelationshipResolver  # noqa: F401
from .schemas import FriendRequestSummary, RequestOutcome, SendRequestPayload  # noqa: F401
