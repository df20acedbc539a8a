import threading


class VoteLedger:
    """In-memory record of which IP has upvoted which domain.

    Lives for the lifetime of the process; a restart resets every vote.
    """

    def __init__(self):
        self._votes: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    @staticmethod
    def _key(ip_address: str, domain: str) -> tuple[str, str]:
        # Tuple keys: IPv6 addresses contain colons.
        return ip_address, domain

    def has_voted(self, ip_address: str, domain: str) -> bool:
        with self._lock:
            return self._key(ip_address, domain) in self._votes

    def record_vote(self, ip_address: str, domain: str) -> None:
        with self._lock:
            self._votes.add(self._key(ip_address, domain))

    def try_record_vote(self, ip_address: str, domain: str) -> bool:
        """Record the vote unless it already exists. Returns True if recorded."""
        key = self._key(ip_address, domain)
        with self._lock:
            if key in self._votes:
                return False
            self._votes.add(key)
            return True

    def discard_vote(self, ip_address: str, domain: str) -> None:
        """Forget a recorded vote so the voter can try again."""
        with self._lock:
            self._votes.discard(self._key(ip_address, domain))

    def clear(self) -> None:
        with self._lock:
            self._votes.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._votes)

    __len__ = size
