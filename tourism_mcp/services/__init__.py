from .bookings import BookingManager
from .catalog import AttractionCatalog
from .mastercard import MastercardClient
from .recommendations import RecommendationService, ScoreResult, score_attraction
from .reservations import ReservationManager
from .signer import OAuthSigner, SignedRequest
from .store import InMemoryTTLStore, RedisTTLStore, TTLStore, create_store

__all__ = [
    "AttractionCatalog",
    "BookingManager",
    "InMemoryTTLStore",
    "MastercardClient",
    "OAuthSigner",
    "RecommendationService",
    "RedisTTLStore",
    "ReservationManager",
    "ScoreResult",
    "SignedRequest",
    "TTLStore",
    "create_store",
    "score_attraction",
]
