"""
Ephemeral Token Broker

Issues short-lived capability tokens that let a pharmacy read one prescription
without logging in. Per token the lifecycle is:

    issued -> valid -> revoked (terminal, explicit)
                    -> expired (terminal, discovered when the token is read)

Expiry is lazy: there is no sweeper, the read that finds an expired token
evicts it. Revocations are kept as tombstones for the life of the process and
are checked before anything else, so a revoked string never resolves again.
"""

import copy
import logging
import re
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from exceptions import InvalidRequest, NotFound, TokenRevoked
from seed_data import DEMO_PRESCRIPTIONS

logger = logging.getLogger(__name__)

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Tokens travel as a URL path segment; anything else in a subject becomes "-"
_UNSAFE_SUBJECT_CHARS = re.compile(r"[^A-Z0-9-]+")

def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))

def token_subject(subject_ref: str) -> str:
    """Subject as embedded in a token: upper case, ``[A-Z0-9-]`` only"""
    return _UNSAFE_SUBJECT_CHARS.sub("-", subject_ref.upper())

@dataclass
class TokenRecord:
    token: str
    subject_ref: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "subjectRef": self.subject_ref,
            "issuedAt": self.issued_at.isoformat(),
            "expiresAt": self.expires_at.isoformat()
        }

@dataclass
class IssuedToken:
    token: str
    expires_at: datetime

@dataclass
class _StoredPayload:
    data: Dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

def placeholder_prescription() -> Dict[str, Any]:
    """Minimal well-formed prescription served for tokens issued without a payload"""
    return {
        "patientInitials": "N/A",
        "patientAge": "N/A",
        "patientGender": "N/A",
        "allergies": [],
        "medications": [],
        "prescriptionText": "",
        "diagnosis": "",
        "safetyWarnings": ["Check for drug interactions before dispensing"],
        "doctorName": "Dr. Unknown",
        "notes": "No prescription details were attached to this token."
    }

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

class PrescriptionTokenBroker:
    """Thread-safe in-memory broker for pharmacy prescription tokens"""

    def __init__(
        self,
        ttl: timedelta = timedelta(hours=48),
        demo_ttl: timedelta = timedelta(days=365),
        token_prefix: str = "MS-RX-P",
        demo_prefix: str = "DEMO-",
        clock: Optional[Callable[[], datetime]] = None,
        ns_clock: Optional[Callable[[], int]] = None
    ):
        self.ttl = ttl
        self.demo_ttl = demo_ttl
        self.token_prefix = token_prefix
        self.demo_prefix = demo_prefix
        self._clock = clock or _utc_now
        self._ns_clock = ns_clock or time.time_ns
        self._lock = threading.RLock()
        self._tokens: Dict[str, TokenRecord] = {}
        self._revoked: Set[str] = set()
        self._payloads: Dict[str, _StoredPayload] = {}

    def _hint(self, token: str) -> str:
        """Loggable form of a token; demo tokens are public"""
        if token.startswith(self.demo_prefix):
            return token
        return "…" + token[-4:]

    def _new_token_string(self, subject_ref: str) -> str:
        # Caller holds the lock
        suffix = self._ns_clock()
        while True:
            candidate = f"{self.token_prefix}{token_subject(subject_ref)}{to_base36(suffix)}"
            if (candidate not in self._tokens
                    and candidate not in self._revoked
                    and candidate not in self._payloads):
                return candidate
            suffix += 1

    def _store(self, token: str, subject_ref: str, ttl: timedelta, payload: Optional[Dict[str, Any]]) -> TokenRecord:
        # Caller holds the lock
        now = self._clock()
        record = TokenRecord(
            token=token,
            subject_ref=subject_ref,
            issued_at=now,
            expires_at=now + ttl
        )
        self._tokens[token] = record
        if payload is not None:
            self._payloads[token] = _StoredPayload(copy.deepcopy(payload), created_at=now)
        return record

    def seed_demo_tokens(self, demos: Optional[List[Dict[str, Any]]] = None) -> List[str]:
        """Create the fixed DEMO-00x tokens; safe to call on every start"""
        demos = DEMO_PRESCRIPTIONS if demos is None else demos
        seeded = []
        with self._lock:
            today = self._clock().date().isoformat()
            for demo in demos:
                if demo["token"] in self._revoked:
                    continue
                payload = dict(demo["prescription"])
                payload.setdefault("encounterDate", today)
                self._store(demo["token"], str(demo["patientId"]), self.demo_ttl, payload)
                seeded.append(demo["token"])

        logger.info(f"Demo tokens seeded: {', '.join(seeded)}")
        return seeded

    def issue_token(self, subject_ref: Any, payload: Optional[Dict[str, Any]] = None) -> IssuedToken:
        subject = str(subject_ref).strip() if subject_ref is not None else ""
        if not subject:
            raise InvalidRequest("Patient ID is required", error_code="SUBJECT_REQUIRED")

        with self._lock:
            token = self._new_token_string(subject)
            record = self._store(token, subject, self.ttl, payload)

        logger.info(f"Issued prescription token for subject {subject}, expires {record.expires_at.isoformat()}")
        return IssuedToken(token=record.token, expires_at=record.expires_at)

    def revoke_token(self, token: str) -> None:
        """Withdraw a token for good; unknown or already revoked tokens are fine"""
        if not token:
            raise InvalidRequest("Token is required", error_code="TOKEN_REQUIRED")

        with self._lock:
            self._revoked.add(token)
            self._tokens.pop(token, None)
            self._payloads.pop(token, None)

        logger.info(f"Revoked prescription token {self._hint(token)}")

    def resolve_token(self, token: str) -> Dict[str, Any]:
        """Return the prescription behind a token.

        Raises TokenRevoked for withdrawn tokens and NotFound for tokens that
        were never issued or have expired (the two are not told apart).
        """
        payload, _ = self.resolve_with_record(token)
        return payload

    def resolve_with_record(self, token: str) -> Tuple[Dict[str, Any], TokenRecord]:
        """resolve_token plus the binding it was checked against, read atomically"""
        with self._lock:
            if token in self._revoked:
                raise TokenRevoked("Token has been revoked", details={"token": token})

            record = self._tokens.get(token)
            if record is None:
                raise NotFound("Invalid or expired token", error_code="TOKEN_NOT_FOUND")

            if record.is_expired(self._clock()):
                del self._tokens[token]
                self._payloads.pop(token, None)
                logger.info(f"Evicted expired prescription token {self._hint(token)}")
                raise NotFound("Invalid or expired token", error_code="TOKEN_NOT_FOUND")

            stored = self._payloads.get(token)
            payload = copy.deepcopy(stored.data) if stored else placeholder_prescription()
            return payload, copy.copy(record)

    def get_record(self, token: str) -> Optional[TokenRecord]:
        """Live binding for a token, without any validity checks"""
        with self._lock:
            record = self._tokens.get(token)
            return copy.copy(record) if record else None

    def list_demo_tokens(self) -> List[Dict[str, Any]]:
        """Live demo tokens only; there is no listing of issued tokens"""
        now = self._clock()
        with self._lock:
            listed = []
            for token, record in self._tokens.items():
                if not token.startswith(self.demo_prefix) or record.is_expired(now):
                    continue
                stored = self._payloads.get(token)
                prescription = stored.data if stored else {}
                listed.append({
                    "token": token,
                    "subjectRef": record.subject_ref,
                    "summary": {
                        "patient": prescription.get("patientInitials", "Unknown"),
                        "diagnosis": prescription.get("diagnosis", "N/A")
                    },
                    "expiresAt": record.expires_at.isoformat()
                })
            return listed

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            return token in self._revoked

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "live_tokens": len(self._tokens),
                "revoked_tokens": len(self._revoked),
                "payloads": len(self._payloads)
            }
