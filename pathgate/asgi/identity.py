from typing import List


def _forwarded_for(scope: dict) -> List[str]:
    hops: List[str] = []
    for header_name, header_value in scope.get("headers", []):
        if header_name.decode("latin1").lower() == "x-forwarded-for":
            hops.extend(
                part.strip()
                for part in header_value.decode("latin1").split(",")
                if part.strip()
            )
    return hops


def client_identity(scope: dict, trusted_hops: int = 1) -> str:
    """Apparent client address after trusting `trusted_hops` proxies.

    Candidate addresses run from the socket peer back through
    X-Forwarded-For, nearest hop first. The first `trusted_hops` of them
    are proxies we trust, the next one is the client. Entries further
    left are client-controlled and never used.
    """
    client = scope.get("client")
    peer = client[0] if client else "unknown"

    addrs = [peer] + list(reversed(_forwarded_for(scope)))
    return addrs[min(trusted_hops, len(addrs) - 1)]
